from django.test import override_settings

from clinic.services.contact import prescription_message, support_link, tel_link, whatsapp_link


def test_whatsapp_link_strips_non_digits_and_encodes_text():
    link = whatsapp_link('+1 (555) 010-0200', 'Hi Bob, see you at 10:00?')
    assert link == 'https://wa.me/15550100200?text=Hi%20Bob%2C%20see%20you%20at%2010%3A00%3F'


def test_whatsapp_link_without_digits_is_none():
    assert whatsapp_link(None, 'x') is None
    assert whatsapp_link('n/a', 'x') is None


def test_tel_link():
    assert tel_link(' +1 555 ') == 'tel:+1 555'
    assert tel_link('') is None


@override_settings(SUPPORT_WHATSAPP_NUMBER='+91 98765 43210')
def test_support_link_uses_configured_number():
    assert support_link('help').startswith('https://wa.me/919876543210?text=help')


def test_prescription_message_lists_medications_and_notes():
    text = prescription_message(
        patient_name='Ann',
        doctor_name='Lee',
        diagnosis='Flu',
        medications=[{'name': 'Paracetamol', 'dosage': '500mg', 'frequency': 'Twice daily', 'duration': '5 days'}],
        notes='Rest well',
    )
    assert 'Dear Ann' in text
    assert 'Dr. Lee' in text
    assert '• Paracetamol - 500mg Twice daily for 5 days' in text
    assert 'Notes: Rest well' in text
