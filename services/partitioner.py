"""Per-site grouping of hazard readings."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from models.records import HazardReading
from services.aggregator import Aggregator, DangerRule, SiteStatistics


class SitePartitioner:
    """Groups readings by configured site name and summarizes each group."""

    def __init__(self, aggregator: Aggregator) -> None:
        self.aggregator = aggregator

    def partition(
        self,
        readings: Iterable[HazardReading],
        site_names: Sequence[str],
        danger_rule: DangerRule = DangerRule.strict_above_40,
    ) -> List[SiteStatistics]:
        """Return one entry per configured site, in configured order.

        Sites with no readings still get an all-zero entry; readings whose
        site is not configured are left out.
        """
        groups: Dict[str, List[HazardReading]] = {name: [] for name in site_names}
        for reading in readings:
            if reading.site_name is None:
                continue
            group = groups.get(reading.site_name)
            if group is not None:
                group.append(reading)

        return [
            self.aggregator.summarize_site(name, groups[name], danger_rule=danger_rule)
            for name in site_names
        ]
