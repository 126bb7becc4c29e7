"""Homepage scraper: fetch URL and extract structural signals.

Extracts title, description, headings, Open Graph image, favicon,
anchors, meta tags and external scripts in document order.
Does NOT crawl subpages or resolve relative URLs.
"""

import logging
import os
from pathlib import Path

import requests
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from errors import FetchError, ParseError
from models import Signals

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

log = logging.getLogger("commerce-audit")

SCRAPER_TIMEOUT_SECONDS = float(os.getenv("SCRAPER_TIMEOUT_SECONDS", "12"))

_REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# Checked in order; the first element with an href wins.
_FAVICON_SELECTORS = ('link[rel="icon"]', 'link[rel="shortcut icon"]')


def fetch_html(url: str) -> str:
    """GET `url` once and return the decoded body. Raises FetchError."""
    try:
        response = requests.get(url, timeout=SCRAPER_TIMEOUT_SECONDS, headers=_REQUEST_HEADERS)
    except requests.RequestException as e:
        raise FetchError(url, str(e)) from e

    elapsed_ms = int(response.elapsed.total_seconds() * 1000)
    log.info("Fetched %s: HTTP %s in %sms", url, response.status_code, elapsed_ms)
    if not response.ok:
        raise FetchError(url, response.reason or "", status=response.status_code)

    # Without a declared charset requests assumes ISO-8859-1; try UTF-8 first.
    if "charset=" not in response.headers.get("Content-Type", "").lower():
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError:
            response.encoding = response.apparent_encoding or "utf-8"
    return response.text


def parse_signals(html: str) -> Signals:
    """
    Parse markup into Signals. Missing elements yield empty values;
    only a parser crash raises ParseError.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
    except Exception as e:
        raise ParseError(f"Could not parse markup: {e}") from e

    # --- Title ---
    title = ""
    title_tag = soup.find("title")
    if title_tag:
        title = title_tag.get_text().strip()

    # --- Meta description ---
    description = ""
    desc_tag = soup.find("meta", attrs={"name": "description"})
    if desc_tag and desc_tag.get("content"):
        description = desc_tag["content"].strip()

    # --- Headings ---
    h1 = [h.get_text().strip() for h in soup.find_all("h1")]
    h2 = [h.get_text().strip() for h in soup.find_all("h2")]

    # --- Open Graph image ---
    og_image = ""
    og_tag = soup.find("meta", attrs={"property": "og:image"})
    if og_tag and og_tag.get("content"):
        og_image = og_tag["content"]

    # --- Favicon ---
    favicon = ""
    for selector in _FAVICON_SELECTORS:
        icon = soup.select_one(selector)
        if icon and icon.get("href"):
            favicon = icon["href"]
            break

    # --- Links (raw, unresolved) ---
    links = [a["href"] for a in soup.find_all("a", href=True)]

    # --- Meta tags: name beats property, later duplicates win ---
    meta_tags: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        key = tag.get("name") or tag.get("property")
        content = tag.get("content")
        if key and content:
            meta_tags[key] = content

    # --- External scripts ---
    scripts = [s["src"] for s in soup.find_all("script", src=True)]

    return Signals(
        title=title,
        description=description,
        h1=h1,
        h2=h2,
        og_image=og_image,
        favicon=favicon,
        links=links,
        meta_tags=meta_tags,
        scripts=scripts,
    )


def extract(url: str) -> Signals:
    """
    Fetch `url` and return its Signals.
    Network and status failures raise FetchError; unparsable markup
    degrades to empty Signals.
    """
    html = fetch_html(url)
    try:
        return parse_signals(html)
    except ParseError as e:
        log.warning("Markup parse failed for %s, using empty signals: %s", url, e)
        return Signals()
