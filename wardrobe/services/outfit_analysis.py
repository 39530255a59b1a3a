"""
Client for the external full-body outfit analysis service.

The service is a black box: it takes a photo, splits it into torso, legs and
feet, classifies each part and scores how well they go together. This module
posts the photo, retries transient failures and reshapes the JSON reply into
the structure the wardrobe UI consumes.
"""
import time
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from wardrobe.config import config

BODY_REGIONS = ("torso", "legs", "feet")
UNKNOWN_TYPE = "unknown"

# Category numbers used by the analysis service
CLOTHING_TYPE_MAP: Dict[int, Dict[str, str]] = {
    0: {"name": "T-Shirt", "value": "t-shirt"},
    1: {"name": "Pants", "value": "pants"},
    2: {"name": "Shorts", "value": "shorts"},
    3: {"name": "Jacket", "value": "jacket"},
    4: {"name": "Blouse", "value": "blouse"},
    5: {"name": "Skirt", "value": "skirt"},
    6: {"name": "Sweater", "value": "sweater"},
    7: {"name": "Hoodie", "value": "hoodie"},
    8: {"name": "Coat", "value": "coat"},
    9: {"name": "Suit", "value": "suit"},
    10: {"name": "Swimsuit", "value": "swimsuit"},
    11: {"name": "Underwear", "value": "underwear"},
    12: {"name": "Socks", "value": "socks"},
    13: {"name": "Shoes", "value": "shoes"},
    14: {"name": "Boots", "value": "boots"},
    15: {"name": "Sandals", "value": "sandals"},
    16: {"name": "Hat", "value": "hat"},
    17: {"name": "Cap", "value": "cap"},
    18: {"name": "Scarf", "value": "scarf"},
    19: {"name": "Gloves", "value": "gloves"},
    20: {"name": "Belt", "value": "belt"},
    21: {"name": "Handbag", "value": "handbag"},
    22: {"name": "Backpack", "value": "backpack"},
}


class OutfitAnalysisError(RuntimeError):
    """The analysis service could not be reached or returned an unusable reply."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def map_category_to_clothing_type(category: int) -> Dict[str, str]:
    """Name and value for a numeric category; unknown numbers map to "unknown"."""
    return CLOTHING_TYPE_MAP.get(category, {"name": "Unknown", "value": UNKNOWN_TYPE})


def detected_type(category: Any) -> str:
    """
    Clothing type for a category as the service reports it.

    Accepts ints, numeric strings ("13") and type names ("Sweater").
    """
    if category is None or category == "":
        return UNKNOWN_TYPE

    try:
        return map_category_to_clothing_type(int(category))["value"]
    except (TypeError, ValueError):
        pass

    label = str(category).strip().lower()
    known = {entry["value"] for entry in CLOTHING_TYPE_MAP.values()}
    return label if label in known else UNKNOWN_TYPE


def _section(data: Any, key: str) -> Dict[str, Any]:
    """Nested object under key; anything that is not an object reads as empty."""
    value = data.get(key) if isinstance(data, dict) else None
    return value if isinstance(value, dict) else {}


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_text(value: Any, default: Optional[str]) -> Optional[str]:
    return str(value) if value not in (None, "") else default


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _region_summary(api_data: Dict[str, Any], region: str, base_url: str) -> Dict[str, Any]:
    top = _section(_section(_section(api_data, "classifications"), region), "top_prediction")
    saved = _section(_section(api_data, "saved_parts"), region)

    return {
        "image": f"{base_url}{saved['url']}" if saved.get("url") else None,
        "classification": {
            "category": top.get("category"),
            "name": _as_text(top.get("name"), "Unknown"),
            "probability": max(0.0, _as_float(top.get("probability"))),
            "percentage": _as_text(top.get("percentage"), "0%"),
        },
        "detected_type": detected_type(top.get("category")),
    }


def _compatibility_summary(api_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    complete = _section(api_data, "complete_outfit_analysis")
    parts = _section(complete, "individual_parts_analysis") or _section(api_data, "outfit_compatibility")
    if not parts:
        return None

    rating = _section(parts, "outfit_rating")
    return {
        "score": _as_float(parts.get("compatibility_score")),
        "rating": {
            "level": rating.get("level"),
            "emoji": rating.get("emoji"),
            "description": rating.get("description"),
        },
        "pairwise": {
            pair: {
                "similarity": details.get("similarity"),
                "level": details.get("compatibility_level"),
            }
            for pair, details in _section(parts, "pairwise_compatibility").items()
            if isinstance(details, dict)
        },
        "suggestions": _as_list(parts.get("suggestions")),
    }


def _full_image_summary(api_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    full = _section(_section(api_data, "complete_outfit_analysis"), "full_image_analysis")
    if not full:
        return None

    overall = _section(full, "overall_rating")
    style = _section(full, "style_analysis")
    return {
        "level": overall.get("level"),
        "description": overall.get("description"),
        "coordination_score": overall.get("coordination_score"),
        "dominant_style": style.get("dominant_style", overall.get("dominant_style")),
        "style_confidence": style.get("style_confidence", overall.get("style_confidence")),
        "style_scores": style.get("all_style_scores") or {},
        "insights": _as_list(full.get("insights")),
    }


def transform_analysis(api_data: Dict[str, Any], base_url: Optional[str] = None) -> Dict[str, Any]:
    """
    Reshape a raw analysis reply into the wardrobe's outfit summary.

    Missing sections degrade to defaults instead of failing, since the
    service omits regions it could not detect.

    Args:
        api_data: Decoded JSON reply from the analysis service
        base_url: Prefix for relative part image URLs (default from config)

    Returns:
        Dict with ``session_id``, per-region ``parts``, ``compatibility`` and
        ``full_image`` (the last two None when the reply lacks them)
    """
    if not isinstance(api_data, dict):
        raise OutfitAnalysisError("Analysis reply is not a JSON object")

    base_url = (base_url if base_url is not None else config.OUTFIT_API_BASE_URL).rstrip("/")

    return {
        "session_id": _as_text(api_data.get("session_id"), None),
        "parts": {region: _region_summary(api_data, region, base_url) for region in BODY_REGIONS},
        "compatibility": _compatibility_summary(api_data),
        "full_image": _full_image_summary(api_data),
    }


class OutfitAnalysisClient:
    """HTTP client for the outfit analysis service."""

    def __init__(self,
                 base_url: Optional[str] = None,
                 endpoint: Optional[str] = None,
                 timeout: Optional[float] = None,
                 retries: Optional[int] = None,
                 api_key: Optional[str] = None,
                 backoff_seconds: float = 0.5,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or config.OUTFIT_API_BASE_URL).rstrip("/")
        self.endpoint = endpoint or config.OUTFIT_API_ANALYSIS_ENDPOINT
        self.timeout = timeout if timeout is not None else config.OUTFIT_API_TIMEOUT
        self.retries = max(1, retries if retries is not None else config.OUTFIT_API_RETRIES)
        self.api_key = api_key if api_key is not None else config.OUTFIT_API_KEY
        self.backoff_seconds = backoff_seconds
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    def _headers(self) -> Dict[str, str]:
        return {"X-API-Key": self.api_key} if self.api_key else {}

    def analyze(self, image_bytes: bytes, filename: str = "outfit.jpg",
                content_type: str = "image/jpeg") -> Dict[str, Any]:
        """
        Send a full-body photo for analysis and return the raw JSON reply.

        Connection errors, timeouts and 5xx replies are retried up to
        ``retries`` attempts in total; 4xx replies fail immediately.

        Raises:
            OutfitAnalysisError: When every attempt fails or the reply is not JSON
        """
        last_error: Optional[OutfitAnalysisError] = None

        for attempt in range(1, self.retries + 1):
            try:
                response = self.session.post(
                    self.url,
                    files={"file": (filename, image_bytes, content_type)},
                    headers=self._headers(),
                    timeout=self.timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                last_error = OutfitAnalysisError(f"Analysis service unreachable: {e}")
                logger.warning(f"Outfit analysis attempt {attempt}/{self.retries} failed: {e}")
            else:
                if response.status_code >= 500:
                    last_error = OutfitAnalysisError(
                        f"Analysis service error {response.status_code}: {response.text[:200]}",
                        status_code=response.status_code,
                    )
                    logger.warning(
                        f"Outfit analysis attempt {attempt}/{self.retries} got {response.status_code}"
                    )
                elif response.status_code >= 400:
                    raise OutfitAnalysisError(
                        f"Analysis service rejected the image ({response.status_code}): {response.text[:200]}",
                        status_code=response.status_code,
                    )
                else:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise OutfitAnalysisError(f"Analysis reply is not JSON: {e}") from e

            if attempt < self.retries and self.backoff_seconds > 0:
                time.sleep(self.backoff_seconds * attempt)

        raise last_error

    def analyze_outfit(self, image_bytes: bytes, filename: str = "outfit.jpg",
                       content_type: str = "image/jpeg") -> Dict[str, Any]:
        """Analyze a photo and return the transformed summary."""
        return transform_analysis(self.analyze(image_bytes, filename, content_type), self.base_url)


_client: Optional[OutfitAnalysisClient] = None


def get_outfit_client() -> OutfitAnalysisClient:
    """Get or create the shared analysis client."""
    global _client
    if _client is None:
        _client = OutfitAnalysisClient()
    return _client
