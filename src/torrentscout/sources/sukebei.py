"""sukebei.nyaa.si search source (adult sibling of nyaa.si, same layout)."""

from __future__ import annotations

from torrentscout.domain.entities import Category

from .nyaa import NyaaFamilySource


class SukebeiSource(NyaaFamilySource):
    id = "sukebeinyaa"
    name = "Sukebei"
    url = "https://sukebei.nyaa.si"
    specialized_category = Category.PORN
    enabled_by_default = False

    _site_category = "0_0"
