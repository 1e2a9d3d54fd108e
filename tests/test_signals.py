"""Tests for the favicon/title health signal."""

import pytest

from umonitor.app.models import HealthLevel
from umonitor.app.signals import (
    SIGNALS,
    AmbientSignal,
    IconVariant,
    PageSignals,
    TitleVariant,
    icon_href,
    icon_svg,
    signal_for,
    title_text,
)


class TestSignalMapping:
    @pytest.mark.parametrize("level,icon,title", [
        (HealthLevel.HEALTHY, IconVariant.GREEN, TitleVariant.PLAIN),
        (HealthLevel.DEGRADED, IconVariant.YELLOW, TitleVariant.ONE_MARK),
        (HealthLevel.CRITICAL, IconVariant.RED, TitleVariant.THREE_MARK),
        (HealthLevel.UNKNOWN, IconVariant.GREY, TitleVariant.QUESTION_MARK),
    ])
    def test_mapping(self, level, icon, title):
        assert signal_for(level) == AmbientSignal(icon, title)

    def test_every_level_mapped(self):
        assert set(SIGNALS) == set(HealthLevel)

    def test_mapping_is_one_to_one(self):
        assert len(set(SIGNALS.values())) == len(HealthLevel)

    def test_unknown_level_raises(self):
        with pytest.raises(ValueError):
            signal_for("purple")


class TestPresentation:
    @pytest.mark.parametrize("variant,expected", [
        (TitleVariant.PLAIN, "uMonitor5"),
        (TitleVariant.ONE_MARK, "uMonitor5 (!)"),
        (TitleVariant.THREE_MARK, "uMonitor5 (!!!)"),
        (TitleVariant.QUESTION_MARK, "uMonitor5 (???)"),
    ])
    def test_title_text(self, variant, expected):
        assert title_text("uMonitor5", variant) == expected

    def test_icon_href(self):
        assert icon_href(IconVariant.RED) == "/icon/red.svg"

    def test_icon_svg_colour_differs(self):
        assert len({icon_svg(v) for v in IconVariant}) == len(IconVariant)
        assert icon_svg(IconVariant.GREEN).startswith("<svg")


class TestPageSignals:
    def test_starts_green(self):
        page = PageSignals("uMonitor5")
        assert page.title == "uMonitor5"
        assert page.icon == "/icon/green.svg"
        assert page.changed_at is None

    def test_apply(self):
        page = PageSignals("uMonitor5")
        page.apply(signal_for(HealthLevel.UNKNOWN))
        assert page.title == "uMonitor5 (???)"
        assert page.icon == "/icon/grey.svg"
        assert page.changed_at is not None

    def test_same_signal_keeps_changed_at(self):
        page = PageSignals("uMonitor5")
        page.apply(signal_for(HealthLevel.HEALTHY))
        assert page.changed_at is None
