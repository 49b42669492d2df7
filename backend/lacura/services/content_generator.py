"""
Marketing content templates for the practice: social posts, newsletters,
email sequences and blog post outlines. Purely template based, no model call.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Dict

from lacura.core.exceptions import BadRequestError
from lacura.schemas.content import ContentLength, ContentRequest, ContentResponse, ContentType

NEWSLETTER_WORDS = {ContentLength.SHORT: 300, ContentLength.MEDIUM: 800, ContentLength.LONG: 1500}
BLOG_WORDS = {ContentLength.SHORT: 500, ContentLength.MEDIUM: 1200, ContentLength.LONG: 2500}
WORDS_PER_MINUTE = 200


def _hashtag(text: str) -> str:
    return re.sub(r"\s+", "", text)


def read_time(word_count: int) -> int:
    return math.ceil(word_count / WORDS_PER_MINUTE)


def linkedin_post(topic: str, tone: str, practice: str, audience: str) -> str:
    templates = {
        "professional": (
            f"💡 {topic} - A key insight for {audience} in {practice}.\n\n"
            f"As a {practice} practitioner, I've seen how {topic.lower()} can transform lives. Here's what I've learned...\n\n"
            f"#{_hashtag(practice)} #Wellness #Health"
        ),
        "friendly": (
            f"Hey {audience}! 👋\n\n"
            f"I wanted to share something about {topic} that might help you on your wellness journey.\n\n"
            f"In my {practice} practice, I often see clients struggling with {topic.lower()}. Here's a simple approach that works...\n\n"
            "What's your experience with this? Drop a comment below! 💬"
        ),
        "authoritative": (
            f"The Science Behind {topic} in {practice}\n\n"
            f"Research consistently shows that {topic.lower()} plays a crucial role in {practice} outcomes. "
            "Here's what the evidence tells us...\n\n"
            f"#EvidenceBased #{_hashtag(practice)} #Wellness"
        ),
        "conversational": (
            f"Quick question: How do you handle {topic.lower()} in your daily routine?\n\n"
            f"I ask because in my {practice} practice, this comes up ALL the time. "
            "And honestly, there's no one-size-fits-all answer...\n\n"
            f"But here's what I've found works for most {audience}..."
        ),
    }
    return templates.get(tone, templates["conversational"])


def instagram_post(topic: str, practice: str, audience: str) -> str:
    return (
        f"✨ {topic} ✨\n\n"
        f"For all my {audience} out there - this is something I see in my {practice} practice every day.\n\n"
        "Swipe to see how you can apply this to your wellness journey! 👆\n\n"
        f"#{_hashtag(practice)} #Wellness #SelfCare #{_hashtag(topic)}"
    )


def twitter_post(topic: str, practice: str, audience: str) -> str:
    short_topic = topic[:17] + "..." if len(topic) > 20 else topic
    return (
        f"{short_topic} - A game changer for {audience} in {practice}. "
        f"Here's why it matters: [thread] #Wellness #{_hashtag(practice)}"
    )


def newsletter(topic: str, practice: str, audience: str, length: ContentLength) -> Dict[str, Any]:
    word_count = NEWSLETTER_WORDS[length]
    return {
        "subject": f"{topic}: What Every {audience} Should Know",
        "content": (
            f"# {topic}: A {practice} Perspective\n\n"
            f"Dear {audience},\n\n"
            f"In my years of {practice} practice, I've learned that {topic.lower()} is one of the most important "
            "factors in achieving lasting wellness...\n\n"
            "## Why This Matters\n\n[Content would be generated based on topic and practice type]\n\n"
            "## Practical Steps\n\n1. [Step 1 based on topic]\n2. [Step 2 based on topic]\n3. [Step 3 based on topic]\n\n"
            "## Your Next Steps\n\n[Call to action based on practice type]\n\n"
            "Warmly,\n[Practitioner Name]"
        ),
        "wordCount": word_count,
        "estimatedReadTime": read_time(word_count),
    }


def email_sequence(topic: str, practice: str, audience: str) -> Dict[str, Any]:
    return {
        "sequence": [
            {
                "day": 0,
                "subject": f"Welcome! Let's talk about {topic}",
                "content": f"Hi there!\n\nThanks for your interest in {practice}. "
                           f"I wanted to share something important about {topic.lower()}...",
            },
            {
                "day": 3,
                "subject": f"The {topic} challenge I see most often",
                "content": f"In my {practice} practice, I notice that {audience} often struggle with...",
            },
            {
                "day": 7,
                "subject": f"Ready to take action on {topic}?",
                "content": f"It's been a week since we started talking about {topic}. Are you ready to...",
            },
        ]
    }


def blog_post(topic: str, practice: str, audience: str, length: ContentLength) -> Dict[str, Any]:
    word_count = BLOG_WORDS[length]
    return {
        "title": f"{topic}: A Complete Guide for {audience}",
        "content": (
            f"# {topic}: A Complete Guide for {audience}\n\n"
            "## Introduction\n\n[Introduction based on topic and practice type]\n\n"
            "## The Problem\n\n[Problem description]\n\n"
            "## The Solution\n\n[Solution based on practice type]\n\n"
            "## Implementation\n\n[Step-by-step implementation]\n\n"
            "## Conclusion\n\n[Conclusion and call to action]"
        ),
        "wordCount": word_count,
        "estimatedReadTime": read_time(word_count),
        "seoKeywords": [topic, practice, audience, "wellness", "health"],
    }


def generate_content(request: ContentRequest) -> ContentResponse:
    if not (request.type and request.topic and request.tone and request.practice_type and request.target_audience):
        raise BadRequestError("Missing required fields")

    topic = request.topic
    tone = request.tone.lower()
    practice = request.practice_type
    audience = request.target_audience

    if request.type == ContentType.SOCIAL_POST:
        content: Any = {
            "linkedin": linkedin_post(topic, tone, practice, audience),
            "instagram": instagram_post(topic, practice, audience),
            "twitter": twitter_post(topic, practice, audience),
        }
    elif request.type == ContentType.NEWSLETTER:
        content = newsletter(topic, practice, audience, request.length)
    elif request.type == ContentType.EMAIL_SEQUENCE:
        content = email_sequence(topic, practice, audience)
    else:
        content = blog_post(topic, practice, audience, request.length)

    return ContentResponse(
        content=content,
        type=request.type,
        generated_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        metadata={
            "topic": topic,
            "tone": request.tone,
            "practiceType": practice,
            "targetAudience": audience,
            "length": request.length.value,
        },
    )
