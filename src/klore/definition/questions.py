"""Human-facing questions synthesized from variable names."""

from __future__ import annotations

import re
from typing import Dict

from .model import GroupKey

_GROUP_QUESTIONS: Dict[GroupKey, Dict[str, str]] = {
    GroupKey.BRANDING: {
        "storeName": "What is your store/company name?",
        "appName": "What is your application name?",
        "companyName": "What is your company name?",
        "tagline": "What is your tagline/slogan?",
        "storeDescription": "Describe your store/company in one paragraph:",
    },
    GroupKey.COLORS: {
        "primaryColor": "What is your primary brand color? (hex)",
        "secondaryColor": "What is your secondary color? (hex)",
        "accentColor": "What is your accent color? (hex)",
    },
    GroupKey.CONTACT: {
        "email": "What is your contact email?",
        "phone": "What is your phone number?",
        "address": "What is your business address?",
        "businessHours": "What are your business hours?",
    },
    GroupKey.SOCIAL: {
        "facebookUrl": "Enter your Facebook URL:",
        "instagramUrl": "Enter your Instagram URL:",
        "twitterUrl": "Enter your Twitter/X URL:",
        "youtubeUrl": "Enter your YouTube URL:",
    },
}

# Used when the variable sits outside the group its name suggests.
_NAME_QUESTIONS: Dict[str, str] = {
    "appName": "What is your store/company name?",
    "storeName": "What is your store/company name?",
    "companyName": "What is your store/company name?",
    "brandName": "What is your store/company name?",
    "primaryColor": "What is your primary brand color? (hex)",
    "secondaryColor": "What is your secondary color? (hex)",
    "contactEmail": "What is your contact email?",
    "email": "What is your contact email?",
    "contactPhone": "What is your phone number?",
    "phone": "What is your phone number?",
    "address": "What is your business address?",
    "physicalAddress": "What is your business address?",
    "businessHours": "What are your business hours?",
}

_CAMEL_RE = re.compile(r"([A-Z])")


def readable_name(name: str) -> str:
    """`primaryColor` -> `primary color`."""
    return _CAMEL_RE.sub(r" \1", name).strip().lower()


def question_for(name: str, group: GroupKey = GroupKey.OTHER) -> str:
    question = _GROUP_QUESTIONS.get(group, {}).get(name)
    if question:
        return question
    return _NAME_QUESTIONS.get(name, f"Enter {readable_name(name)}:")
