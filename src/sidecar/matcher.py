"""Find the notes related to a URL.

Exact matches are notes whose URL normalises to the same key as the target
(or point at the same Reddit post).  Same-domain matches share the target's
host, with every YouTube host counted as one domain.  Exact matches always
win: a note is never reported in both lists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sidecar.note import MatchedNote, MatchResult, Note
from sidecar.platforms.reddit import REDDIT_DOMAINS, extract_subreddit, is_same_reddit_post
from sidecar.platforms.youtube import extract_youtube_channel, is_youtube_domain
from sidecar.urls import extract_domain, is_same_domain, is_valid_url, iter_url_values, normalize_url, urls_match

if TYPE_CHECKING:
    from sidecar.config import SidecarSettings
    from sidecar.index import UrlIndex


def find_matching_notes(url: str, settings: "SidecarSettings", index: "UrlIndex") -> MatchResult:
    """Classify the indexed notes related to *url*.

    Only notes sharing the target's domain or normalised URL are scanned.
    An invalid target yields an empty :class:`MatchResult`.
    """
    if not normalize_url(url):
        return MatchResult()

    exact: list[MatchedNote] = []
    same_domain: list[MatchedNote] = []
    subreddit_groups: dict[str, list[MatchedNote]] = {}
    target_is_youtube = is_youtube_domain(url)

    for note in _candidates(url, index):
        frontmatter = index.frontmatter_for(note)
        domain_match: MatchedNote | None = None
        exact_match: MatchedNote | None = None

        for prop_name, value in iter_url_values(frontmatter, settings.url_property_fields):
            if not is_valid_url(value):
                continue
            if urls_match(value, url) or is_same_reddit_post(value, url):
                exact_match = MatchedNote(note, "exact", value, prop_name)
                break
            if (
                domain_match is None
                and settings.enable_tld_search
                and (is_same_domain(value, url) or (target_is_youtube and is_youtube_domain(value)))
            ):
                domain_match = MatchedNote(note, "tld", value, prop_name)

        if exact_match is not None:
            exact.append(exact_match)
        elif domain_match is not None:
            same_domain.append(domain_match)

    same_domain = _apply_subreddit_rules(url, settings, same_domain, subreddit_groups)

    matched_channel: str | None = None
    if settings.enable_youtube_channel_filter and target_is_youtube and exact:
        fields = settings.youtube_channel_property_fields
        channel = extract_youtube_channel(index.frontmatter_for(exact[0].note), fields)
        if channel:
            matched_channel = channel
            same_domain = [
                m
                for m in same_domain
                if extract_youtube_channel(index.frontmatter_for(m.note), fields) == channel
            ]

    return MatchResult(
        exact=exact,
        same_domain=same_domain,
        platform_groups=subreddit_groups or None,
        matched_channel=matched_channel,
    )


def _candidates(url: str, index: "UrlIndex") -> list[Note]:
    """Notes on the target's domain or normalised URL, de-duplicated in order.

    Sibling hosts of the same platform are scanned too: every YouTube host,
    and ``old.``/``new.reddit.com`` for the same Reddit post.
    """
    domain = extract_domain(url)
    domain_files = index.get_files_for_domain(domain) if domain else []
    for other in _sibling_hosts(url, domain, index):
        domain_files += index.get_files_for_domain(other)
    merged = dict.fromkeys(domain_files + index.get_files_for_normalized_url(url))
    return list(merged)


def _sibling_hosts(url: str, domain: str | None, index: "UrlIndex") -> list[str]:
    if domain in REDDIT_DOMAINS:
        return [d for d in REDDIT_DOMAINS if d != domain]
    if is_youtube_domain(url):
        return [
            other
            for other in index.iter_domains()
            if other != domain and "youtu" in other and is_youtube_domain(f"https://{other}/")
        ]
    return []


def _apply_subreddit_rules(
    url: str,
    settings: "SidecarSettings",
    same_domain: list[MatchedNote],
    groups: dict[str, list[MatchedNote]],
) -> list[MatchedNote]:
    """Bucket same-domain matches by subreddit, then apply the subreddit filter."""
    if settings.enable_subreddit_explorer:
        for match in same_domain:
            subreddit = extract_subreddit(match.url)
            if subreddit:
                groups.setdefault(subreddit, []).append(match)

    current_subreddit = extract_subreddit(url)
    if settings.enable_subreddit_filter and current_subreddit:
        return [m for m in same_domain if extract_subreddit(m.url) == current_subreddit]
    return same_domain
