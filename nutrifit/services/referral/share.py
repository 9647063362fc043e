"""
Referral share content.
"""

from urllib.parse import quote

from nutrifit.config.business_constants import SHARE_IMAGE_PATH, SHARE_TITLE
from nutrifit.config.settings import settings
from nutrifit.services.referral.code_generator import normalize_code
from nutrifit.services.referral.schemas import ShareContent


def generate_share_content(
    code: str, display_name: str | None = None
) -> ShareContent:
    """
    Build the invitation text and signup link for a referral code.

    Args:
        code: Referral code
        display_name: Referrer's name shown in the message

    Returns:
        ShareContent
    """
    code = normalize_code(code)
    inviter = display_name or "A friend"
    base_url = settings.share_base_url

    return ShareContent(
        title=SHARE_TITLE,
        message=(
            f"Hey! {inviter} invited you to try DailyNutriFit - personalized "
            f"fruit delivery for better health. Use code {code} and we both "
            f"get credits!"
        ),
        url=f"{base_url}/signup?ref={quote(code)}",
        image=f"{base_url}{SHARE_IMAGE_PATH}",
    )
