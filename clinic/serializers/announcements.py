from django.conf import settings
from rest_framework import serializers

from clinic.models import Announcement
from clinic.serializers.common import clean_text

CATEGORIES = [c for c, _ in Announcement.CATEGORY_CHOICES]


class AnnouncementCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, allow_blank=True)
    content = serializers.CharField(allow_blank=True)
    category = serializers.ChoiceField(choices=CATEGORIES, default=Announcement.CATEGORY_GENERAL)
    isPublished = serializers.BooleanField(default=False)

    def validate_title(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Title is required.')
        return v

    def validate_content(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Content is required.')
        limit = settings.ANNOUNCEMENT_MAX_LENGTH
        if len(v) > limit:
            raise serializers.ValidationError(f'Content must be at most {limit} characters.')
        return v


class AnnouncementQuerySerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=CATEGORIES + ['all'], required=False)
