"""SEO analysis, scoring and recommendations for rendered HTML."""

import json
from typing import Any, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..utils.logging import get_structured_logger
from .types import (
    AccessibilityAnalysis,
    HeadingAnalysis,
    ImageAnalysis,
    LinkAnalysis,
    SEOAnalysis,
    TitleAnalysis,
)

logger = get_structured_logger(__name__)

TITLE_RANGE = (30, 60)
DESCRIPTION_RANGE = (120, 160)
ACCESSIBILITY_PENALTY = 20


class SEOAnalyzer:
    """Extracts meta tags and scores on-page SEO signals."""

    def _get_soup(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    def extract_meta(self, html: str) -> dict[str, Any]:
        """Collect title, description, social tags, canonical, robots and JSON-LD."""
        soup = self._get_soup(html)

        def content_of(**attrs) -> Optional[str]:
            tag = soup.find("meta", attrs=attrs)
            return tag.get("content") if tag else None

        title = soup.find("title")
        canonical = soup.find("link", rel="canonical")

        og = {}
        for tag in soup.find_all("meta", property=True):
            prop = tag.get("property", "")
            if prop.startswith("og:") and tag.get("content"):
                og[prop[len("og:") :]] = tag["content"]

        twitter = {}
        for tag in soup.find_all("meta", attrs={"name": True}):
            name = tag.get("name", "")
            if name.startswith("twitter:") and tag.get("content"):
                twitter[name[len("twitter:") :]] = tag["content"]

        json_ld = []
        for script in soup.find_all("script", type="application/ld+json"):
            try:
                json_ld.append(json.loads(script.string or ""))
            except ValueError:
                logger.debug("Skipping invalid JSON-LD block")

        return {
            "title": title.get_text() if title else None,
            "description": content_of(name="description"),
            "og": og,
            "twitter": twitter,
            "canonical": canonical.get("href") if canonical else None,
            "robots": content_of(name="robots"),
            "json_ld": json_ld,
        }

    def analyze(self, html: str, page_url: str) -> SEOAnalysis:
        soup = self._get_soup(html)
        analysis = SEOAnalysis()

        title = soup.find("title")
        if title and title.get_text():
            length = len(title.get_text())
            analysis.title = TitleAnalysis(
                present=True,
                length=length,
                optimal=TITLE_RANGE[0] <= length <= TITLE_RANGE[1],
            )

        description = soup.find("meta", attrs={"name": "description"})
        if description and description.get("content"):
            length = len(description["content"])
            analysis.meta_description = TitleAnalysis(
                present=True,
                length=length,
                optimal=DESCRIPTION_RANGE[0] <= length <= DESCRIPTION_RANGE[1],
            )

        h1_count = len(soup.find_all("h1"))
        analysis.headings = HeadingAnalysis(h1_count=h1_count, structure=h1_count == 1)

        images = soup.find_all("img")
        analysis.images = ImageAnalysis(
            total=len(images),
            missing_alt=sum(1 for img in images if not img.get("alt")),
        )

        analysis.links = self._count_links(soup, page_url)
        analysis.mobile_optimized = (
            soup.find("meta", attrs={"name": "viewport"}) is not None
        )

        issues = []
        if analysis.images.missing_alt > 0:
            issues.append(f"{analysis.images.missing_alt} images missing alt text")
        if h1_count == 0:
            issues.append("Missing H1 heading")
        if not analysis.mobile_optimized:
            issues.append("Missing viewport meta tag")

        analysis.accessibility = AccessibilityAnalysis(
            score=max(0, 100 - len(issues) * ACCESSIBILITY_PENALTY), issues=issues
        )
        return analysis

    def _count_links(self, soup: BeautifulSoup, page_url: str) -> LinkAnalysis:
        host = urlparse(page_url).hostname or ""
        links = LinkAnalysis()

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"]
            if href.startswith("http"):
                if host and host in href:
                    links.internal += 1
                else:
                    links.external += 1
            elif href.startswith("/") or href.startswith("#"):
                links.internal += 1

        return links

    def calculate_score(self, analysis: SEOAnalysis) -> int:
        """Weighted score normalised to 0-100."""
        score = 0
        max_score = 0

        max_score += 20
        if analysis.title.present:
            score += 20 if analysis.title.optimal else 10

        max_score += 20
        if analysis.meta_description.present:
            score += 20 if analysis.meta_description.optimal else 10

        max_score += 15
        if analysis.headings.structure:
            score += 15
        elif analysis.headings.h1_count > 0:
            score += 8

        max_score += 15
        if analysis.images.total > 0:
            with_alt = analysis.images.total - analysis.images.missing_alt
            score += round(15 * with_alt / analysis.images.total)

        max_score += 15
        if analysis.mobile_optimized:
            score += 15

        max_score += 15
        score += round(analysis.accessibility.score / 100 * 15)

        return round(score / max_score * 100)

    def generate_recommendations(self, analysis: SEOAnalysis) -> list[str]:
        recommendations = []

        if not analysis.title.present:
            recommendations.append("Add a title tag to your page")
        elif not analysis.title.optimal:
            if analysis.title.length < TITLE_RANGE[0]:
                recommendations.append("Title is too short - aim for 30-60 characters")
            else:
                recommendations.append("Title is too long - aim for 30-60 characters")

        if not analysis.meta_description.present:
            recommendations.append(
                "Add a meta description to improve search snippets"
            )
        elif not analysis.meta_description.optimal:
            if analysis.meta_description.length < DESCRIPTION_RANGE[0]:
                recommendations.append(
                    "Meta description is too short - aim for 120-160 characters"
                )
            else:
                recommendations.append(
                    "Meta description is too long - aim for 120-160 characters"
                )

        if analysis.headings.h1_count == 0:
            recommendations.append("Add an H1 heading to your page")
        elif analysis.headings.h1_count > 1:
            recommendations.append("Use only one H1 heading per page")

        if analysis.images.missing_alt > 0:
            recommendations.append(
                f"Add alt text to {analysis.images.missing_alt} images for accessibility"
            )

        if not analysis.mobile_optimized:
            recommendations.append("Add viewport meta tag for mobile optimization")

        recommendations.extend(
            f"Accessibility: {issue}" for issue in analysis.accessibility.issues
        )

        if not recommendations:
            recommendations.append("Great! Your page follows SEO best practices")

        return recommendations
