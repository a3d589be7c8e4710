import html
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

DEFAULT_FRONTEND_URL = "https://tenderfind.co.za"
DIGEST_MAX_LISTED = 5


class DigestMatch(BaseModel):
    tender_title: str
    score: int
    department: Optional[str] = None
    closing_date: Optional[datetime] = None


class DigestMessage(BaseModel):
    subject: str
    body: str
    html_body: str


_PAGE_STYLE = """
        body { font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5; }
        .container { max-width: 600px; margin: 0 auto; background: white; border-radius: 8px; overflow: hidden; }
        .header { background-color: #1B5E20; color: white; padding: 20px; text-align: center; }
        .content { padding: 30px; }
        .tender-card { background-color: #E8F5E8; border-left: 4px solid #2E7D32; padding: 15px; margin: 15px 0; border-radius: 4px; }
        .button { display: inline-block; background-color: #1B5E20; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; margin: 20px 0; }
        .footer { background-color: #f8f9fa; padding: 20px; text-align: center; color: #666; font-size: 14px; }
"""


def _safe_url(url: Optional[str]) -> str:
    if not url or not url.startswith(('http://', 'https://')):
        return DEFAULT_FRONTEND_URL
    return html.escape(url, quote=True)


class NotificationMessageBuilder:
    @staticmethod
    def build_match_html(tender_title: str, message: str, base_url: Optional[str] = None) -> str:
        """HTML alternative for a single high-priority match email."""
        safe_title = html.escape(tender_title or "")
        safe_message = html.escape(message or "")
        link = _safe_url(base_url)

        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>TenderFind SA - New Match</title>
    <style>{_PAGE_STYLE}    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1 style="margin: 0; font-size: 24px;">TenderFind SA</h1>
        </div>
        <div class="content">
            <h2 style="color: #1B5E20;">New Tender Match Found!</h2>
            <p>We found a tender that matches your business profile:</p>
            <div class="tender-card">
                <h3 style="margin-top: 0; color: #2E7D32;">{safe_title}</h3>
                <p>{safe_message}</p>
            </div>
            <p>Log in to TenderFind SA to view the full tender details and submit your application.</p>
            <a href="{link}" class="button">View Tender Details</a>
        </div>
        <div class="footer">
            <p>You're receiving this email because you enabled tender match notifications in TenderFind SA.</p>
            <p>To unsubscribe or modify your notification preferences, log in to your account and visit Settings.</p>
        </div>
    </div>
</body>
</html>"""

    @staticmethod
    def build_digest(
        matches: List[DigestMatch],
        base_url: Optional[str] = None,
        max_listed: int = DIGEST_MAX_LISTED
    ) -> Optional[DigestMessage]:
        """
        Build the daily digest for a user's unviewed matches.

        Matches are expected best first; only the first max_listed are
        rendered. Returns None when there is nothing to report.
        """
        if not matches:
            return None

        count = len(matches)
        subject = f"Daily Tender Digest - {count} New Matches"
        body = f"Your daily tender digest contains {count} new matching opportunities."

        cards = []
        for match in matches[:max_listed]:
            closing = match.closing_date.strftime('%Y-%m-%d') if match.closing_date else "Not specified"
            department = html.escape(match.department or "Not specified")
            cards.append(f"""            <div class="tender-card">
                <h4 style="margin-top: 0; color: #2E7D32;">{html.escape(match.tender_title)}</h4>
                <p style="margin: 5px 0; color: #666;">Match Score: {match.score}%</p>
                <p style="margin: 5px 0; color: #666;">Department: {department}</p>
                <p style="margin: 5px 0; color: #666;">Closing: {closing}</p>
            </div>
""")

        remainder = ""
        if count > max_listed:
            remainder = f"            <p><strong>And {count - max_listed} more matches...</strong></p>\n"

        html_body = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>TenderFind SA - Daily Digest</title>
    <style>{_PAGE_STYLE}    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1 style="margin: 0;">TenderFind SA Daily Digest</h1>
        </div>
        <div class="content">
            <h2 style="color: #1B5E20;">Your Daily Tender Matches</h2>
            <p>Here are your top tender matches for today:</p>
{''.join(cards)}{remainder}            <a href="{_safe_url(base_url)}" class="button">View All Matches</a>
        </div>
    </div>
</body>
</html>"""

        return DigestMessage(subject=subject, body=body, html_body=html_body)
