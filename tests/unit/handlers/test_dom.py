"""Tests for selector query helpers."""

from typing import Any

from snippet_runner.handlers.dom import init_query_and_apply, is_xpath_selector


class TestIsXpathSelector:
    def test_wrapped_expression_is_xpath(self) -> None:
        assert is_xpath_selector("xpath(//div)")

    def test_plain_selector_is_css(self) -> None:
        assert not is_xpath_selector("div.ad")
        assert not is_xpath_selector("xpath(//div")


class TestInitQueryAndApply:
    def test_xpath_selector_queries_inner_expression(self, document: Any) -> None:
        document.xpath_nodes["//div[@id='ad']"] = ["node-1", "node-2"]
        seen: list[str] = []

        query = init_query_and_apply("xpath(//div[@id='ad'])", document)
        query(seen.append)

        assert seen == ["node-1", "node-2"]

    def test_css_selector_uses_select(self, document: Any) -> None:
        document.css_nodes["div.ad"] = ["node"]
        seen: list[str] = []

        init_query_and_apply("div.ad", document)(seen.append)

        assert seen == ["node"]

    def test_query_runs_against_current_document(self, document: Any) -> None:
        seen: list[str] = []
        query = init_query_and_apply("xpath(//video)", document)

        query(seen.append)
        document.xpath_nodes["//video"] = ["video"]
        query(seen.append)

        assert seen == ["video"]

    def test_none_callback_is_ignored(self, document: Any) -> None:
        document.xpath_nodes["//div"] = ["node"]

        init_query_and_apply("xpath(//div)", document)(None)
        init_query_and_apply("div", document)(None)
