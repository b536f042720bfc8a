"""
Tests for background removal selection and the sequential runner.
"""

from unittest.mock import MagicMock

from bulk_lister.adapters import ServiceRejectedError
from bulk_lister.enhancer import BackgroundRemover, EnhancementSelection


class TestEnhancementSelection:

    def test_toggle(self):
        selection = EnhancementSelection()

        assert selection.toggle("a") is True
        assert selection.is_selected("a")
        assert selection.toggle("a") is False
        assert not selection.is_selected("a")

    def test_enhanced_cannot_be_selected(self, make_product):
        selection = EnhancementSelection()
        selection.mark_enhanced("a")

        assert selection.toggle("a") is False
        selection.select_all([make_product("a"), make_product("b")])
        assert selection.selected == {"b"}

    def test_clear_and_forget(self):
        selection = EnhancementSelection()
        selection.toggle("a")
        selection.toggle("b")
        selection.mark_enhanced("c")

        selection.forget("c")
        selection.clear()

        assert selection.selected == set()
        assert selection.enhanced == set()


class TestBackgroundRemover:

    def test_only_selected_products_sequentially(self, make_product, enhancement_adapter):
        products = [make_product("a"), make_product("b"), make_product("c")]
        selection = EnhancementSelection()
        selection.toggle("a")
        selection.toggle("c")
        progress = []

        done = BackgroundRemover(enhancement_adapter).run(products, selection, on_progress=progress.append)

        assert done == ["a", "c"]
        assert products[0].cover_url.endswith("_nobg.png")
        assert products[0].thumbnail_urls[0] == products[0].cover_url
        assert products[1].cover_url.endswith("0.jpg")
        assert [(p.current, p.total) for p in progress] == [(1, 2), (2, 2)]
        assert selection.is_enhanced("a") and selection.is_enhanced("c")
        assert selection.selected == set()

    def test_correlation_ids(self, make_product, enhancement_adapter):
        products = [make_product("a"), make_product("b")]
        selection = EnhancementSelection()
        selection.select_all(products)

        BackgroundRemover(enhancement_adapter).run(products, selection)

        ids = [c.args[1] for c in enhancement_adapter.remove_background.call_args_list]
        assert ids[0].startswith("bulk-") and ids[0].endswith("-0")
        assert ids[1].endswith("-1")

    def test_failure_is_skipped(self, make_product):
        adapter = MagicMock()
        adapter.remove_background.side_effect = [ServiceRejectedError("busy"), "https://cdn.test/b_clean.png"]
        products = [make_product("a"), make_product("b")]
        original_cover = products[0].cover_url
        selection = EnhancementSelection()
        selection.select_all(products)
        progress = []

        done = BackgroundRemover(adapter).run(products, selection, on_progress=progress.append)

        assert done == ["b"]
        assert products[0].cover_url == original_cover
        assert products[1].cover_url == "https://cdn.test/b_clean.png"
        assert len(progress) == 2
        assert selection.is_selected("a")

    def test_rerun_does_not_touch_enhanced(self, make_product, enhancement_adapter):
        products = [make_product("a")]
        selection = EnhancementSelection()
        selection.toggle("a")
        remover = BackgroundRemover(enhancement_adapter)

        remover.run(products, selection)
        cover = products[0].cover_url
        selection.selected.add("a")
        again = remover.run(products, selection)

        assert again == []
        assert products[0].cover_url == cover
        assert enhancement_adapter.remove_background.call_count == 1

    def test_photo_count_unchanged(self, make_product, enhancement_adapter):
        products = [make_product("a", photos=3)]
        selection = EnhancementSelection()
        selection.toggle("a")

        BackgroundRemover(enhancement_adapter).run(products, selection)

        assert products[0].photo_count == 3
        assert len(products[0].thumbnail_urls) == 3
