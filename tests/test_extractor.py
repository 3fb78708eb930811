"""Tests for the image URL extractor (fast regex pass + structural pass).

No network is involved; every test feeds a literal page fragment.
"""

from __future__ import annotations

from unittest.mock import patch

from backend.scraper.extractor import (
    EXTRACTION_STRATEGIES,
    extract_fast,
    extract_image_url,
    extract_structural,
    normalize_escapes,
)


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_RESULTS_PAGE = """\
<!DOCTYPE html>
<html>
<head><title>red apple - Search Images</title></head>
<body>
  <ul class="dgControl_list">
    <li>
      <a class="iusc" m="{&quot;murl&quot;:&quot;https://images.example.com/apple-full.jpg&quot;,&quot;turl&quot;:&quot;https://tse1.example.net/th?id=1&quot;}">
        <img class="mimg" src="https://tse1.example.net/th?id=1" alt="apple">
      </a>
    </li>
  </ul>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# normalize_escapes
# ---------------------------------------------------------------------------

class TestNormalizeEscapes:
    def test_unescapes_slashes(self) -> None:
        assert normalize_escapes("http:\\/\\/a.com\\/b.jpg") == "http://a.com/b.jpg"

    def test_decodes_unicode_ampersand(self) -> None:
        assert normalize_escapes("http://a.com/b?x=1\\u0026y=2") == "http://a.com/b?x=1&y=2"

    def test_decodes_html_entity_ampersand(self) -> None:
        assert normalize_escapes("http://a.com/b?x=1&amp;y=2") == "http://a.com/b?x=1&y=2"

    def test_plain_url_unchanged(self) -> None:
        assert normalize_escapes("http://example.com/a.jpg") == "http://example.com/a.jpg"


# ---------------------------------------------------------------------------
# extract_fast
# ---------------------------------------------------------------------------

class TestExtractFast:
    def test_murl_extracted_unchanged(self) -> None:
        content = '<script>var x = {"murl":"http://example.com/a.jpg"};</script>'
        assert extract_fast(content) == "http://example.com/a.jpg"

    def test_escaped_turl_used_when_murl_absent(self) -> None:
        content = '{"turl":"http:\\/\\/example.com\\/b.jpg"}'
        assert extract_fast(content) == "http://example.com/b.jpg"

    def test_murl_wins_over_earlier_turl(self) -> None:
        content = '{"turl":"http://t.example.com/t.jpg","murl":"http://m.example.com/m.jpg"}'
        assert extract_fast(content) == "http://m.example.com/m.jpg"

    def test_first_murl_wins(self) -> None:
        content = '{"murl":"http://one.example.com/1.jpg"} {"murl":"http://two.example.com/2.jpg"}'
        assert extract_fast(content) == "http://one.example.com/1.jpg"

    def test_whitespace_around_colon_tolerated(self) -> None:
        content = '{"murl" :  "https://example.com/c.png"}'
        assert extract_fast(content) == "https://example.com/c.png"

    def test_non_http_value_ignored(self) -> None:
        assert extract_fast('{"murl":"data:image/png;base64,AAAA"}') is None

    def test_entity_encoded_attribute_not_matched(self) -> None:
        assert extract_fast(_RESULTS_PAGE) is None

    def test_empty_content(self) -> None:
        assert extract_fast("") is None


# ---------------------------------------------------------------------------
# extract_structural
# ---------------------------------------------------------------------------

class TestExtractStructural:
    def test_metadata_attribute_murl(self) -> None:
        content = '<div m="{&quot;murl&quot;:&quot;http://x/1.png&quot;}"></div>'
        assert extract_fast(content) is None
        assert extract_structural(content) == "http://x/1.png"

    def test_result_container_preferred(self) -> None:
        content = (
            '<div m=\'{"murl":"http://other.example.com/o.png"}\'></div>'
            '<a class="iusc" m=\'{"murl":"http://result.example.com/r.png"}\'></a>'
        )
        assert extract_structural(content) == "http://result.example.com/r.png"

    def test_turl_when_murl_not_http(self) -> None:
        content = '<a class="iusc" m=\'{"murl":"/relative.png","turl":"https://t.example.com/t.png"}\'></a>'
        assert extract_structural(content) == "https://t.example.com/t.png"

    def test_malformed_metadata_skipped(self) -> None:
        content = (
            '<a class="iusc" m="{not json"></a>'
            '<a class="iusc" m=\'{"murl":"http://good.example.com/g.png"}\'></a>'
        )
        assert extract_structural(content) == "http://good.example.com/g.png"

    def test_non_object_metadata_skipped(self) -> None:
        content = '<a class="iusc" m="[1, 2]"></a><img class="mimg" src="http://main.example.com/m.jpg">'
        assert extract_structural(content) == "http://main.example.com/m.jpg"

    def test_malformed_metadata_falls_through_to_main_image(self) -> None:
        content = '<a class="iusc" m="{oops"></a><img class="mimg" src="https://main.example.com/m.jpg">'
        assert extract_structural(content) == "https://main.example.com/m.jpg"

    def test_main_image_requires_http(self) -> None:
        content = '<img class="mimg" src="/local.jpg"><img src="https://any.example.com/a.jpg">'
        assert extract_structural(content) == "https://any.example.com/a.jpg"

    def test_protocol_relative_image_normalised(self) -> None:
        content = '<img src="//cdn.example.com/img.png">'
        assert extract_structural(content) == "https://cdn.example.com/img.png"

    def test_data_src_used_when_src_is_placeholder(self) -> None:
        content = '<img src="data:image/gif;base64,R0lGOD" data-src="https://lazy.example.com/l.jpg">'
        assert extract_structural(content) == "https://lazy.example.com/l.jpg"

    def test_relative_images_ignored(self) -> None:
        assert extract_structural('<img src="/a.png"><img src="b.png">') is None

    def test_no_markers(self) -> None:
        assert extract_structural("<html><body><p>nothing here</p></body></html>") is None


# ---------------------------------------------------------------------------
# extract_image_url
# ---------------------------------------------------------------------------

class TestExtractImageUrl:
    def test_strategy_order(self) -> None:
        assert EXTRACTION_STRATEGIES == (extract_fast, extract_structural)

    def test_realistic_results_page(self) -> None:
        assert extract_image_url(_RESULTS_PAGE) == "https://images.example.com/apple-full.jpg"

    def test_fast_pass_short_circuits(self) -> None:
        content = '{"murl":"http://example.com/a.jpg"}'
        with patch("backend.scraper.extractor.BeautifulSoup") as mock_soup:
            assert extract_image_url(content) == "http://example.com/a.jpg"
        mock_soup.assert_not_called()

    def test_fast_pass_preferred_over_dom(self) -> None:
        content = '<img src="https://dom.example.com/d.jpg"><script>{"turl":"http://fast.example.com/f.jpg"}</script>'
        assert extract_image_url(content) == "http://fast.example.com/f.jpg"

    def test_nothing_found_returns_none(self) -> None:
        assert extract_image_url("<html><body>No results</body></html>") is None

    def test_garbage_input(self) -> None:
        assert extract_image_url("<<< >>> {{{ not html") is None
