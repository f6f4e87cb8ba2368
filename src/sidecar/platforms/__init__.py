"""Per-platform URL keys and explorer aggregators."""

from sidecar.platforms.github import extract_github_repo, get_all_github_notes
from sidecar.platforms.reddit import (
    extract_post_id,
    extract_subreddit,
    get_all_reddit_notes,
    is_same_reddit_post,
)
from sidecar.platforms.twitter import extract_twitter_user, get_all_twitter_notes
from sidecar.platforms.youtube import extract_youtube_channel, get_all_youtube_notes, is_youtube_domain

__all__ = [
    "extract_github_repo",
    "extract_post_id",
    "extract_subreddit",
    "extract_twitter_user",
    "extract_youtube_channel",
    "get_all_github_notes",
    "get_all_reddit_notes",
    "get_all_twitter_notes",
    "get_all_youtube_notes",
    "is_same_reddit_post",
    "is_youtube_domain",
]
