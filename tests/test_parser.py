# File: tests/test_parser.py
import pytest

from image_scout.crawler.models import HtmlPage
from image_scout.parser.html_parser import parse_html
from image_scout.utils import is_local, normalize_url, page_location, storage_name, to_path

HTML = """
<html><head><title>t</title></head><body>
  <a href="/about/">About</a>
  <a href="about/../about/#team">About again</a>
  <a href="mailto:me@example.com">Mail</a>
  <a href="javascript:void(0)">JS</a>
  <a href="#top">Top</a>
  <a href="https://Other.EXAMPLE/x">Other</a>
  <img src="img/logo.png"><img src="/img/logo.png"><img src="data:image/png;base64,AAAA">
  <img alt="no source">
</body></html>
"""


def test_parse_links_and_images():
    parsed = parse_html(HTML, "http://example.com/")
    assert parsed.links == ["http://example.com/about/", "https://other.example/x/"]
    assert parsed.images == ["http://example.com/img/logo.png"]


def test_base_tag():
    parsed = parse_html('<base href="/sub/"><a href="page.html">p</a>', "http://example.com/")
    assert parsed.links == ["http://example.com/sub/page.html"]


def test_only_http_and_file_locations_kept():
    html = (
        '<a href="ftp://files.example.com/pub/">ftp</a><a href="tel:+100">tel</a>'
        '<a href="news/">news</a><img src="ftp://files.example.com/x.png"><img src="x.png">'
    )
    parsed = parse_html(html, "http://example.com/")
    assert parsed.links == ["http://example.com/news/"]
    assert parsed.images == ["http://example.com/x.png"]

    local = parse_html('<a href="a/">a</a><a href="gopher://old/">g</a>', "file:///srv/site/")
    assert local.links == ["file:///srv/site/a/"]


def test_html_page_sequences():
    page = HtmlPage("http://example.com/", HTML)
    assert len(page.links()) == 2
    assert page.images().get(0) == "http://example.com/img/logo.png"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("HTTP://Example.com", "http://example.com/"),
        ("http://example.com/a/b/../c", "http://example.com/a/c/"),
        ("http://example.com/pic.PNG#x", "http://example.com/pic.PNG"),
        ("http://example.com/search?q=1", "http://example.com/search/?q=1"),
        ("file:///srv/site/./index.html", "file:///srv/site/index.html"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_local_helpers(tmp_path):
    uri = (tmp_path / "site").as_uri() + "/"
    assert is_local(uri)
    assert is_local(str(tmp_path))
    assert not is_local("https://example.com/")
    assert to_path(uri) == tmp_path / "site"
    assert page_location(uri) == (tmp_path / "site").as_uri() + "/index.html"
    assert page_location("file:///srv/page.html") == "file:///srv/page.html"
    assert page_location("http://example.com/a/") == "http://example.com/a/"


def test_storage_name():
    name = storage_name("http://example.com/img/logo.PNG")
    assert name.endswith(".png")
    assert len(name) == 40 + 4
    assert storage_name("http://example.com/img?id=3").count(".") == 0
    assert storage_name("http://a/x.png") != storage_name("http://b/x.png")
