#!/usr/bin/env python3
"""
Advice category classification.

Maps advisory identifiers to exactly one of the three fixed categories.
The mapping is operator-maintained configuration: it is validated when a
classifier is built so that an id listed under two categories fails fast.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from ..exceptions import CategoryMapError
from ..models.advice import CATEGORIES, PERFORMANCE, PRIVACY, BEST_PRACTICE

logger = logging.getLogger(__name__)

DEFAULT_ADVICE_CATEGORIES: Dict[str, List[str]] = {
    PERFORMANCE: [
        'assetsRedirects', 'avoidRenderBlocking', 'avoidScalingImages', 'cacheHeaders',
        'cacheHeadersLong', 'compressAssets', 'connectionKeepAlive', 'cpuTimeSpentInRendering',
        'cpuTimeSpentInScripting', 'cssPrint', 'cssSize', 'documentRedirect', 'favicon',
        'fewFonts', 'fewRequestsPerDomain', 'firstContentfulPaint', 'googleTagManager',
        'headerSize', 'imageSize', 'inlineCss', 'javascriptSize', 'jquery', 'largestContentfulPaint',
        'longHeaders', 'longTasks', 'manyHeaders', 'mimeTypes', 'optimalCssSize', 'pageSize',
        'privateAssets', 'responseOk', 'spof', 'spdy'
    ],
    PRIVACY: [
        'amp', 'contentSecurityPolicyHeader', 'facebook', 'fingerprint', 'ga', 'googleReCaptcha',
        'https', 'mixedContent', 'referrerPolicyHeader', 'strictTransportSecurityHeader',
        'surveillance', 'thirdParty', 'thirdPartyCookies', 'thirdPartyPrivacy', 'youtube'
    ],
    BEST_PRACTICE: [
        'charset', 'cumulativeLayoutShift', 'doctype', 'language', 'metaDescription',
        'optimizely', 'pageTitle', 'unnecessaryHeaders', 'url'
    ],
}


class CategoryClassifier:
    """Closed lookup from advice id to category."""

    def __init__(self, mapping: Optional[Mapping[str, Iterable[str]]] = None):
        """
        Build and validate the lookup.

        Args:
            mapping: {category: [advice ids]}; defaults to the built-in map

        Raises:
            CategoryMapError: If a category is unknown or missing, or an
                advice id appears in more than one category
        """
        mapping = DEFAULT_ADVICE_CATEGORIES if mapping is None else mapping
        self._lookup: Dict[str, str] = {}
        self._by_category: Dict[str, List[str]] = {}

        unknown = set(mapping) - set(CATEGORIES)
        if unknown:
            raise CategoryMapError("unknown categories", list(unknown))
        missing = set(CATEGORIES) - set(mapping)
        if missing:
            raise CategoryMapError("missing categories", list(missing))

        duplicates = set()
        for category in CATEGORIES:
            ids = list(mapping[category])
            self._by_category[category] = ids
            for advice_id in ids:
                if advice_id in CATEGORIES:
                    raise CategoryMapError("category names cannot be advice ids", [advice_id])
                if advice_id in self._lookup:
                    duplicates.add(advice_id)
                self._lookup[advice_id] = category

        if duplicates:
            raise CategoryMapError("advice ids listed in more than one category", list(duplicates))

        logger.debug(f"Loaded advice category map with {len(self._lookup)} ids")

    @classmethod
    def from_json_file(cls, path: str) -> 'CategoryClassifier':
        """Load a {category: [advice ids]} mapping from a JSON file."""
        with open(Path(path), 'r', encoding='utf-8') as f:
            mapping = json.load(f)
        if not isinstance(mapping, dict):
            raise CategoryMapError(f"expected a JSON object in {path}")
        logger.info(f"Loaded advice categories from {path}")
        return cls(mapping)

    def classify(self, advice_id: str) -> Optional[str]:
        """Return the advice id's category, or None when it is unknown."""
        return self._lookup.get(advice_id)

    @staticmethod
    def is_category(advice_id: str) -> bool:
        """True for the three category pseudo ids."""
        return advice_id in CATEGORIES

    def advice_ids(self, category: str) -> List[str]:
        return list(self._by_category[category])

    def __contains__(self, advice_id: str) -> bool:
        return advice_id in self._lookup

    def __len__(self) -> int:
        return len(self._lookup)
