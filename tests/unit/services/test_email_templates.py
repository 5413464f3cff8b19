"""
Unit Tests for the email templates
"""
from app.services.email_service import announcement_email, password_reset_email


class TestAnnouncementEmail:

    def test_markup_in_user_text_is_escaped(self):
        subject, html_content, text_content = announcement_email(
            '<script>alert(1)</script>', 'Read <b>this</b> & that', 'Ada "Admin"'
        )

        assert '<script>' not in html_content
        assert '&lt;script&gt;alert(1)&lt;/script&gt;' in html_content
        assert 'Read &lt;b&gt;this&lt;/b&gt; &amp; that' in html_content
        assert 'Ada &quot;Admin&quot;' in html_content
        assert text_content.startswith('<script>alert(1)</script>')
        assert subject.endswith('<script>alert(1)</script>')


class TestPasswordResetEmail:

    def test_name_is_escaped_and_link_kept(self):
        _, html_content, text_content = password_reset_email('<i>Grace</i>', 'https://hub.example.com/reset?id=1')

        assert 'Hi &lt;i&gt;Grace&lt;/i&gt;,' in html_content
        assert 'href="https://hub.example.com/reset?id=1"' in html_content
        assert 'https://hub.example.com/reset?id=1' in text_content
