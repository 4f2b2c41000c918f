"""webqa.discovery: locating and fetching the CSS/JS resources of a page."""

from webqa.discovery.pipeline import DEFAULT_PHASES, Phase, ResourceDiscovery, discover_resources

__all__ = ["DEFAULT_PHASES", "Phase", "ResourceDiscovery", "discover_resources"]
