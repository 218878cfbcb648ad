"""Ad delivery subsystem, isolated from the conversion path."""

from .banner import BannerAdSlot
from .interstitial import InterstitialAdManager

__all__ = ["BannerAdSlot", "InterstitialAdManager"]
