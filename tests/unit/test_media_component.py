"""
Tests for media uploads: validation, dimensions, storage and attachment.
"""

from __future__ import annotations

import io
from unittest.mock import patch
from uuid import uuid4

import pytest
from PIL import Image

from inkwell.components.media import (
    ListMediaInput,
    MediaConfig,
    UploadMediaInput,
    build_media_config,
    inspect_content,
    mime_to_extension,
    read_image,
    run,
    run_list_for_article,
    run_upload,
    validate_upload,
)
from inkwell.rules.models import UploadsRules

CONFIG = MediaConfig(base_url="http://blog.test")


def png_bytes(width: int = 4, height: int = 3) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 10, 10)).save(buf, format="PNG")
    return buf.getvalue()


def _upload(article_id, owner_id, data: bytes, content_type: str = "image/png", name="cat.png"):
    return UploadMediaInput(
        article_id=article_id,
        owner_id=owner_id,
        filename=name,
        content_type=content_type,
        data=data,
    )


class TestValidation:
    def test_accepts_allowed_image(self) -> None:
        assert validate_upload("image/png", 100, CONFIG) == []

    def test_rejects_disallowed_type(self) -> None:
        errors = validate_upload("application/pdf", 100, CONFIG)
        assert [e.code for e in errors] == ["invalid_mime_type"]
        assert errors[0].kind == "validation"

    def test_rejects_empty(self) -> None:
        assert [e.code for e in validate_upload("image/png", 0, CONFIG)] == ["empty_file"]

    def test_size_limit_is_inclusive(self) -> None:
        config = MediaConfig(max_upload_bytes=10)
        assert validate_upload("image/png", 10, config) == []
        assert [e.code for e in validate_upload("image/png", 11, config)] == ["file_too_large"]


def jpeg_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buf, format="JPEG")
    return buf.getvalue()


class TestContentSniffing:
    def test_raster_type_and_dimensions(self) -> None:
        assert read_image(png_bytes(7, 5)) == ("image/png", 7, 5)

    def test_garbage_is_unreadable(self) -> None:
        assert read_image(b"not an image") == (None, None, None)

    def test_matching_raster(self) -> None:
        errors, mime_type, metadata = inspect_content(jpeg_bytes(), "image/jpeg")
        assert errors == []
        assert mime_type == "image/jpeg"
        assert metadata == {"width": 2, "height": 2}

    def test_html_declared_as_png(self) -> None:
        errors, _, _ = inspect_content(b"<html><script>x()</script></html>", "image/png")
        assert [e.code for e in errors] == ["invalid_image"]
        assert errors[0].kind == "validation"

    def test_jpeg_declared_as_png(self) -> None:
        errors, mime_type, _ = inspect_content(jpeg_bytes(), "image/png")
        assert [e.code for e in errors] == ["mime_mismatch"]
        assert mime_type == "image/jpeg"

    def test_svg_has_no_dimensions(self) -> None:
        svg = b'<?xml version="1.0"?>\n<svg xmlns="http://www.w3.org/2000/svg" width="10"/>'
        errors, mime_type, metadata = inspect_content(svg, "image/svg+xml")
        assert errors == []
        assert mime_type == "image/svg+xml"
        assert metadata == {"width": None, "height": None}

    def test_non_svg_declared_as_svg(self) -> None:
        errors, _, _ = inspect_content(png_bytes(), "image/svg+xml")
        assert [e.code for e in errors] == ["invalid_image"]


class TestUpload:
    def test_stores_and_attaches(self, uow, clock, file_store, owner_id, make_article) -> None:
        article = make_article()

        result = run_upload(
            _upload(article.id, owner_id, png_bytes(4, 3)),
            uow=uow,
            storage=file_store,
            time=clock,
            config=CONFIG,
        )

        assert result.success
        media = result.media
        assert media.filename.endswith(".png")
        assert media.filename != "cat.png"
        assert media.original_name == "cat.png"
        assert media.path == f"media/{media.filename}"
        assert media.metadata == {"width": 4, "height": 3}
        assert result.url == f"http://blog.test/media/{media.filename}"
        assert file_store.files[media.path] == png_bytes(4, 3)
        assert uow.state.links == [(article.id, media.id)]

    def test_unowned_article_is_not_found(self, uow, clock, file_store, make_article) -> None:
        article = make_article()

        result = run_upload(
            _upload(article.id, uuid4(), png_bytes()),
            uow=uow,
            storage=file_store,
            time=clock,
            config=CONFIG,
        )

        assert result.errors[0].kind == "not_found"
        assert file_store.files == {}

    def test_invalid_type_stores_nothing(
        self, uow, clock, file_store, owner_id, make_article
    ) -> None:
        article = make_article()

        result = run_upload(
            _upload(article.id, owner_id, b"%PDF-1.4", "application/pdf", "doc.pdf"),
            uow=uow,
            storage=file_store,
            time=clock,
            config=CONFIG,
        )

        assert result.errors[0].code == "invalid_mime_type"
        assert file_store.files == {}

    def test_disguised_file_stores_nothing(
        self, uow, clock, file_store, owner_id, make_article
    ) -> None:
        article = make_article()

        result = run_upload(
            _upload(article.id, owner_id, b"<html><body>hi</body></html>", "image/png"),
            uow=uow,
            storage=file_store,
            time=clock,
            config=CONFIG,
        )

        assert not result.success
        assert result.errors[0].kind == "validation"
        assert result.errors[0].code == "invalid_image"
        assert file_store.files == {}
        assert uow.state.media == {}

    def test_db_failure_removes_stored_file(
        self, uow, clock, file_store, owner_id, make_article
    ) -> None:
        article = make_article()
        uow.fail_media_save = True

        result = run_upload(
            _upload(article.id, owner_id, png_bytes()),
            uow=uow,
            storage=file_store,
            time=clock,
            config=CONFIG,
        )

        assert not result.success
        assert result.errors[0].kind == "persistence"
        assert file_store.files == {}
        assert len(file_store.deleted) == 1
        assert uow.state.media == {}

    def test_svg_upload(self, uow, clock, file_store, owner_id, make_article) -> None:
        article = make_article()
        svg = b'<svg xmlns="http://www.w3.org/2000/svg"/>'

        result = run_upload(
            _upload(article.id, owner_id, svg, "image/svg+xml", "logo.svg"),
            uow=uow,
            storage=file_store,
            time=clock,
            config=CONFIG,
        )

        assert result.media.filename.endswith(".svg")
        assert result.media.metadata == {"width": None, "height": None}


class TestListForArticle:
    def test_lists_attached(self, uow, clock, file_store, owner_id, make_article) -> None:
        article = make_article()
        other = make_article()
        for target in (article, article, other):
            run_upload(
                _upload(target.id, owner_id, png_bytes()),
                uow=uow,
                storage=file_store,
                time=clock,
                config=CONFIG,
            )

        result = run_list_for_article(
            ListMediaInput(article_id=article.id, owner_id=owner_id), uow=uow
        )

        assert result.success
        assert len(result.items) == 2

    def test_unowned_is_not_found(self, uow, make_article) -> None:
        article = make_article()
        result = run_list_for_article(
            ListMediaInput(article_id=article.id, owner_id=uuid4()), uow=uow
        )
        assert result.errors[0].kind == "not_found"


class TestHelpers:
    @pytest.mark.parametrize(
        ("mime", "ext"),
        [("image/jpeg", "jpg"), ("image/png", "png"), ("image/gif", "gif"),
         ("image/svg+xml", "svg"), ("application/x-unknown", "bin")],
    )
    def test_mime_to_extension(self, mime: str, ext: str) -> None:
        assert mime_to_extension(mime) == ext

    def test_config_from_rules(self) -> None:
        rules = UploadsRules(max_upload_bytes=5, allowlist_mime_types=["image/png"])
        config = build_media_config(rules, base_url="http://x")
        assert config.allowed_mime_types == ("image/png",)
        assert config.max_upload_bytes == 5
        assert config.base_url == "http://x"

    def test_dispatcher_requires_storage(self, uow, owner_id) -> None:
        with pytest.raises(ValueError):
            run(_upload(uuid4(), owner_id, b"x"), uow=uow)

    def test_storage_failure_is_persistence_error(
        self, uow, clock, file_store, owner_id, make_article
    ) -> None:
        article = make_article()
        with patch.object(file_store, "save", side_effect=OSError("read-only")):
            result = run_upload(
                _upload(article.id, owner_id, png_bytes()),
                uow=uow,
                storage=file_store,
                time=clock,
                config=CONFIG,
            )
        assert result.errors[0].kind == "persistence"
        assert file_store.deleted == []
