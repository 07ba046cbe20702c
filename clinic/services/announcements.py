from typing import Optional

from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.models import Announcement
from clinic.services.audit import log_action
from clinic.services.contact import EMERGENCY_MESSAGE, support_link


def serialize_announcement(a: Announcement) -> dict:
    profile = getattr(a.author, 'profile', None)
    return {
        'id': a.id,
        'title': a.title,
        'content': a.content,
        'category': a.category,
        'isPublished': a.is_published,
        'publishedAt': a.published_at.isoformat() if a.published_at else None,
        'createdAt': a.created_at.isoformat(),
        'author': {
            'id': a.author_id,
            'fullName': a.author.display_name(),
            'specialization': profile.specialization if profile else None,
        },
        'emergencyLink': support_link(EMERGENCY_MESSAGE) if a.category == Announcement.CATEGORY_EMERGENCY else None,
    }


def published(category: Optional[str] = None):
    qs = Announcement.objects.filter(is_published=True).select_related('author__profile')
    if category and category != 'all':
        qs = qs.filter(category=category)
    return qs.order_by('-published_at', '-id')


def authored_by(user):
    return Announcement.objects.filter(author=user).select_related('author__profile').order_by('-created_at', '-id')


def create(author, *, title: str, content: str, category: str, is_published: bool) -> Announcement:
    a = Announcement.objects.create(
        author=author,
        title=title,
        content=content,
        category=category,
        is_published=is_published,
        published_at=timezone.now() if is_published else None,
    )
    log_action(user=author, action='announcement_create', object_type='announcement', object_id=a.id,
               detail={'category': category, 'published': is_published})
    return a


def _own(author, announcement_id: int) -> Announcement:
    a = authored_by(author).filter(id=announcement_id).first()
    if not a:
        raise NotFound('Announcement not found')
    return a


def publish(author, announcement_id: int) -> Announcement:
    a = _own(author, announcement_id)
    if not a.is_published:
        a.is_published = True
        a.published_at = timezone.now()
        a.save(update_fields=['is_published', 'published_at', 'updated_at'])
        log_action(user=author, action='announcement_publish', object_type='announcement', object_id=a.id)
    return a


def delete(author, announcement_id: int) -> None:
    a = _own(author, announcement_id)
    a.delete()
    log_action(user=author, action='announcement_delete', object_type='announcement', object_id=announcement_id)
