import pytest

from firmsite.domain.validation import (
    extract_image_placeholders,
    is_absolute_url,
    validate_article,
    validate_category,
    validate_gallery_image,
)


def _article(**overrides):
    fields = {
        "title": "GST rate changes",
        "category": "GST Update",
        "summary": "What changed this quarter",
    }
    fields.update(overrides)
    return fields


def _codes(errors):
    return {e.code for e in errors}


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/a.jpg", True),
        ("http://example.com", True),
        ("ftp://example.com/a.jpg", False),
        ("/media/a.jpg", False),
        ("not a url", False),
        ("https://", False),
    ],
)
def test_is_absolute_url(url, expected):
    assert is_absolute_url(url) is expected


def test_extract_image_placeholders_in_order():
    content = "Intro [[IMAGE:https://a.com/1.png]] middle [[IMAGE: https://b.com/2.png ]] end"
    assert extract_image_placeholders(content) == ["https://a.com/1.png", "https://b.com/2.png"]


def test_extract_image_placeholders_empty():
    assert extract_image_placeholders(None) == []
    assert extract_image_placeholders("no images here") == []


def test_valid_article_has_no_errors(rules):
    assert validate_article(_article(), rules.articles) == []


def test_article_missing_required_fields(rules):
    errors = validate_article({}, rules.articles)
    assert _codes(errors) == {"title_required", "category_required", "summary_required"}
    assert {e.field for e in errors} == {"title", "category", "summary"}


def test_article_blank_title_is_missing(rules):
    errors = validate_article(_article(title="   "), rules.articles)
    assert _codes(errors) == {"title_required"}


def test_article_title_length_limit(rules):
    limit = rules.articles.title.max
    assert validate_article(_article(title="x" * limit), rules.articles) == []
    errors = validate_article(_article(title="x" * (limit + 1)), rules.articles)
    assert _codes(errors) == {"title_too_long"}


def test_article_summary_length_limit(rules):
    errors = validate_article(_article(summary="s" * 501), rules.articles)
    assert _codes(errors) == {"summary_too_long"}


def test_article_invalid_category(rules):
    errors = validate_article(_article(category="Gossip"), rules.articles)
    assert _codes(errors) == {"category_invalid"}
    assert "GST Update" in errors[0].message


def test_article_external_url_must_be_absolute(rules):
    errors = validate_article(_article(image_url="images/local.png"), rules.articles)
    assert _codes(errors) == {"image_url_invalid"}


def test_article_store_managed_url_is_trusted(rules):
    fields = _article(image_url="/media/folder/abc.jpg", media_id="folder/abc")
    assert validate_article(fields, rules.articles) == []


def test_article_media_without_url(rules):
    errors = validate_article(_article(media_id="folder/abc"), rules.articles)
    assert "media_without_url" in _codes(errors)


def test_article_content_placeholder_urls_checked(rules):
    ok = _article(content="See [[IMAGE:https://cdn.example.com/chart.png]]")
    assert validate_article(ok, rules.articles) == []

    bad = _article(content="See [[IMAGE:chart.png]]")
    errors = validate_article(bad, rules.articles)
    assert _codes(errors) == {"content_image_invalid"}
    assert errors[0].field == "content"


def test_validate_category_only_checks_present_field():
    assert validate_category("article", {"title": ""}) == []
    assert validate_category("article", {"category": None}) == []
    assert _codes(validate_category("article", {"category": "Office"})) == {"category_invalid"}
    assert validate_category("gallery", {"category": "Office"}) == []


def test_gallery_requires_title_and_url(rules):
    errors = validate_gallery_image({}, rules.gallery)
    assert _codes(errors) == {"title_required", "image_url_required"}


def test_gallery_defaults_are_valid(rules):
    fields = {"title": "Office opening", "image_url": "https://example.com/o.jpg"}
    assert validate_gallery_image(fields, rules.gallery) == []


def test_gallery_description_limit(rules):
    fields = {
        "title": "Team",
        "image_url": "https://example.com/t.jpg",
        "description": "d" * (rules.gallery.description.max + 1),
    }
    assert _codes(validate_gallery_image(fields, rules.gallery)) == {"description_too_long"}


def test_gallery_external_cannot_have_media(rules):
    fields = {
        "title": "Team",
        "image_url": "https://example.com/t.jpg",
        "is_external": True,
        "media_id": "folder/abc",
    }
    assert "external_with_media" in _codes(validate_gallery_image(fields, rules.gallery))


def test_gallery_display_order_must_be_int(rules):
    fields = {"title": "Team", "image_url": "https://example.com/t.jpg", "display_order": "first"}
    assert _codes(validate_gallery_image(fields, rules.gallery)) == {"display_order_invalid"}

    fields["display_order"] = True
    assert _codes(validate_gallery_image(fields, rules.gallery)) == {"display_order_invalid"}


@pytest.mark.parametrize(
    "url",
    ["/media/jkrishnan-gallery/abc123.jpg", " /media/x.png ", "https://cdn.example.com/a.png"],
)
def test_placeholder_accepts_store_and_absolute_urls(rules, url):
    fields = _article(content=f"Chart: [[IMAGE:{url}]]")
    assert validate_article(fields, rules.articles) == []


@pytest.mark.parametrize("url", ["//evil.example.com/a.png", "/", "javascript:alert(1)", "ftp://a.com/x"])
def test_placeholder_rejects_other_urls(rules, url):
    fields = _article(content=f"Chart: [[IMAGE:{url}]]")
    assert _codes(validate_article(fields, rules.articles)) == {"content_image_invalid"}
