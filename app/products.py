"""
Product Category Pages

The category pages are the storefront's members-only area. Each one asks
the auth gate for the current identity and shows the forbidden page to
anonymous visitors. The product names are fixed demo content.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from app import pages
from app.auth.dependencies import optional_user
from app.models.identity import Identity

router = APIRouter(default_response_class=HTMLResponse)
logger = logging.getLogger(__name__)

CATEGORIES: Dict[str, List[str]] = {
    "Men": ["Green", "Blue"],
    "Women": ["Pink", "Yellow"],
    "Kid": ["Pink/Yellow", "Blue/Pink"],
}

LOGIN_REQUIRED_MESSAGE = "Please log in to browse our socks."


def render_category(who: str, user: Optional[Identity]) -> str:
    if user is None:
        logger.info("Anonymous visitor denied access to the %s category", who)
        return pages.forbidden(LOGIN_REQUIRED_MESSAGE)
    return pages.category(who, CATEGORIES[who])


@router.get("/men")
async def mens_collection(user: Optional[Identity] = Depends(optional_user)) -> str:
    return render_category("Men", user)


@router.get("/women")
async def womens_collection(user: Optional[Identity] = Depends(optional_user)) -> str:
    return render_category("Women", user)


@router.get("/kids")
async def kids_collection(user: Optional[Identity] = Depends(optional_user)) -> str:
    return render_category("Kid", user)
