"""Static catalog tables: genres, add-on pricing, order status display metadata."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Tuple


GENRE_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "hip-hop": ("hip hop", "trap", "rap", "hiphop"),
        "rnb": ("r&b", "rnb", "soul", "alternative r&b"),
        "reggae": ("reggae", "dancehall", "dub"),
        "latin": ("latin", "reggaeton", "bachata", "salsa"),
        "electronic": ("electronic", "edm", "house", "techno"),
        "pop": ("pop", "alternative", "indie pop"),
        "rock": ("rock", "indie", "alternative rock"),
        "world": ("world", "indigenous", "medicina", "musica medicina"),
        "other": (),
    }
)

GENRE_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "hip-hop": "Hip Hop / Trap / Rap",
        "rnb": "R&B / Soul",
        "reggae": "Reggae / Dancehall",
        "latin": "Latin / Reggaeton",
        "electronic": "Electronic / EDM",
        "pop": "Pop / Alternative",
        "rock": "Rock / Indie",
        "world": "World / Indigenous / Medicina",
        "other": "Other / Mixed",
    }
)

ORDER_STATUSES: Tuple[str, ...] = (
    "pending",
    "pending_payment",
    "paid",
    "accepted",
    "in_progress",
    "review",
    "revision",
    "completed",
    "refunded",
    "cancellation_requested",
)

# Per-tier add-on prices in whole dollars; index 0 is the free tier.
ADD_ON_PRICES: Mapping[str, Tuple[int, ...]] = MappingProxyType(
    {
        "stems": (0, 10, 25, 40),
        "analog": (0, 15, 35, 50),
        "mixing": (0, 20, 50, 75),
        "mastering": (0, 15, 40, 60),
        "revision": (0, 5, 15, 25),
    }
)

TIER_INDEX: Mapping[str, int] = MappingProxyType({"$0": 0, "$25": 1, "$125": 2, "$250": 3})

COMPLEXITY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "$0": "🟢 Free AI",
        "$25": "🟡 Demo",
        "$125": "🟠 Artist",
        "$250": "🔴 Industry",
    }
)


@dataclass(frozen=True)
class StatusDisplay:
    status: str
    emoji: str
    title: str
    description: str
    color: str


_STATUS_DISPLAY: List[StatusDisplay] = [
    StatusDisplay(
        status="accepted",
        emoji="🤝",
        title="Project Accepted!",
        description="Great news! A producer has accepted your project and will begin working on it soon.",
        color="#14B8A6",
    ),
    StatusDisplay(
        status="in_progress",
        emoji="🎹",
        title="Work in Progress",
        description="Your song is actively being produced! Our team is crafting your vision into reality.",
        color="#8B5CF6",
    ),
    StatusDisplay(
        status="review",
        emoji="👀",
        title="Under Review",
        description="Your project is being reviewed for quality assurance before delivery.",
        color="#06B6D4",
    ),
    StatusDisplay(
        status="completed",
        emoji="🎉",
        title="Project Completed!",
        description="Your song is ready! Use the link below to download your finished track.",
        color="#10B981",
    ),
    StatusDisplay(
        status="revision",
        emoji="🔄",
        title="Revision in Progress",
        description="We're working on the requested changes to your project.",
        color="#F59E0B",
    ),
    StatusDisplay(
        status="refunded",
        emoji="💸",
        title="Refund Processed",
        description="Your payment has been refunded. The funds will appear in your account within 5-10 business days.",
        color="#EF4444",
    ),
    StatusDisplay(
        status="cancellation_requested",
        emoji="📋",
        title="Cancellation Under Review",
        description="We've received your cancellation request and are reviewing it. We'll get back to you shortly.",
        color="#F59E0B",
    ),
]

STATUS_DISPLAY: Mapping[str, StatusDisplay] = MappingProxyType(
    {entry.status: entry for entry in _STATUS_DISPLAY}
)
NOTIFIABLE_STATUSES: Tuple[str, ...] = tuple(entry.status for entry in _STATUS_DISPLAY)

# Discord embed colors / emoji keyed by order status.
STATUS_EMBED_COLORS: Mapping[str, int] = MappingProxyType(
    {
        "pending": 0xFFA500,
        "pending_payment": 0xFFD700,
        "paid": 0x3498DB,
        "accepted": 0x14B8A6,
        "in_progress": 0x9B59B6,
        "review": 0x1ABC9C,
        "revision": 0xE67E22,
        "completed": 0x2ECC71,
        "refunded": 0xE74C3C,
        "cancellation_requested": 0xE67E22,
    }
)
STATUS_EMOJI: Mapping[str, str] = MappingProxyType(
    {
        "pending": "⏳",
        "pending_payment": "💳",
        "paid": "✅",
        "accepted": "🤝",
        "in_progress": "🎹",
        "review": "👀",
        "revision": "🔄",
        "completed": "🎉",
        "refunded": "💸",
        "cancellation_requested": "📋",
    }
)
DEFAULT_EMBED_COLOR = 0x7C3AED


def genre_display_name(category: str | None, default: str = "Not specified") -> str:
    if not category:
        return default
    return GENRE_DISPLAY_NAMES.get(category, category)


def tier_index(tier: str | None) -> int:
    return TIER_INDEX.get(tier or "", 1)


def describe_add_ons(
    *,
    tier: str | None,
    recorded_stems: bool = False,
    analog: bool = False,
    mixing: bool = False,
    mastering: bool = False,
    revisions: int = 0,
) -> List[Tuple[str, int]]:
    """Return (label, dollars) pairs for the selected add-ons at the tier's price point."""

    index = tier_index(tier)
    lines: List[Tuple[str, int]] = []
    if recorded_stems:
        lines.append(("Recorded Stems", ADD_ON_PRICES["stems"][index]))
    if analog:
        lines.append(("Analog Equipment", ADD_ON_PRICES["analog"][index]))
    if mixing:
        lines.append(("Mixing Service", ADD_ON_PRICES["mixing"][index]))
    if mastering:
        lines.append(("Mastering Service", ADD_ON_PRICES["mastering"][index]))
    if revisions > 0:
        label = f"{revisions} Revision{'s' if revisions > 1 else ''}"
        lines.append((label, ADD_ON_PRICES["revision"][index] * revisions))
    return lines


def status_display(status: str) -> StatusDisplay:
    entry = STATUS_DISPLAY.get(status)
    if entry:
        return entry
    return StatusDisplay(
        status=status,
        emoji="📋",
        title="Status Update",
        description=f"Your project status has been updated to: {status}",
        color="#8B5CF6",
    )
