"""Tests for filename canonicalisation, allow-list validation and key generation."""

import pytest

from chatfiles.core.exceptions import ValidationError
from chatfiles.core.files.naming import (
    ALLOWED_TYPES,
    MAX_FILENAME_BYTES,
    build_storage_key,
    canonical_filename,
    category_label,
    file_category,
    generate_filename,
    is_previewable,
    validate_upload,
)

ALLOWED_PAIRS = [(ct, ext) for ct, exts in ALLOWED_TYPES.items() for ext in exts]


class TestValidateUpload:
    """Tests for validate_upload."""

    @pytest.mark.parametrize("content_type,ext", ALLOWED_PAIRS)
    def test_accepts_every_allowed_pair(self, content_type: str, ext: str):
        """Every (content type, extension) pair in the allow-list passes."""
        validated = validate_upload(f"holiday{ext}", content_type)
        assert validated.extension == ext
        assert validated.original_filename == f"holiday{ext}"

    def test_extension_check_is_case_insensitive(self):
        validated = validate_upload("PHOTO.JPG", "image/jpeg")
        assert validated.extension == ".jpg"
        assert validated.original_filename == "PHOTO.JPG"

    def test_rejects_executable_disguised_as_image(self):
        """Allowed content type with a foreign extension is a mismatch."""
        with pytest.raises(ValidationError) as exc_info:
            validate_upload("invoice.exe", "image/png")
        assert exc_info.value.reason == "extension_mismatch"
        assert exc_info.value.message == "Image file extension is not valid"
        assert exc_info.value.status_code == 400

    def test_rejects_extension_of_another_allowed_type(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload("clip.mp4", "application/pdf")
        assert exc_info.value.reason == "extension_mismatch"
        assert exc_info.value.message == "Document file extension is not valid"

    def test_rejects_missing_extension(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload("README", "audio/mpeg")
        assert exc_info.value.message == "Audio file extension is not valid"

    @pytest.mark.parametrize(
        "content_type,message",
        [
            ("image/svg+xml", "Unsupported image format"),
            ("video/x-msvideo", "Unsupported video format"),
            ("application/x-msdownload", "Unsupported document format"),
            ("text/plain", "Unsupported file format"),
            ("", "Unsupported file format"),
        ],
    )
    def test_rejects_content_type_outside_allow_list(self, content_type: str, message: str):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload("anything.png", content_type)
        assert exc_info.value.reason == "unsupported_type"
        assert exc_info.value.message == message

    @pytest.mark.parametrize("content_type", ["image/png", "application/pdf", "video/mp4"])
    def test_rejects_filename_over_255_bytes(self, content_type: str):
        """Length is counted in UTF-8 bytes regardless of type."""
        ext = ALLOWED_TYPES[content_type][0]
        # 84 three-byte characters = 252 bytes, plus the extension
        name = "가" * 84 + ext
        assert len(name) < MAX_FILENAME_BYTES
        assert len(name.encode("utf-8")) > MAX_FILENAME_BYTES

        with pytest.raises(ValidationError) as exc_info:
            validate_upload(name, content_type)
        assert exc_info.value.reason == "filename_too_long"

    def test_accepts_filename_of_exactly_255_bytes(self):
        name = "a" * (MAX_FILENAME_BYTES - 4) + ".pdf"
        assert validate_upload(name, "application/pdf").original_filename == name


class TestCanonicalFilename:
    """Tests for canonical_filename."""

    def test_repairs_utf8_read_as_latin1(self):
        garbled = "résumé.pdf".encode("utf-8").decode("latin-1")
        assert garbled != "résumé.pdf"
        assert canonical_filename(garbled) == "résumé.pdf"

    def test_keeps_proper_unicode(self):
        assert canonical_filename("회의록.docx") == "회의록.docx"

    def test_keeps_genuine_latin1_text(self):
        """'café' is not valid UTF-8 when re-encoded, so it is left alone."""
        assert canonical_filename("café.png") == "café.png"

    def test_decodes_utf8_bytes(self):
        assert canonical_filename("사진.jpg".encode("utf-8")) == "사진.jpg"

    def test_rejects_undecodable_bytes_with_generic_message(self):
        with pytest.raises(ValidationError) as exc_info:
            canonical_filename(b"\xff\xfe\xfa.png")
        assert exc_info.value.reason == "invalid_filename"
        assert exc_info.value.message == "Invalid file name"

    @pytest.mark.parametrize("raw", ["\x81\x9d.png", "tab\there.png", "bell\x07.png", "del\x7f.png"])
    def test_rejects_control_characters(self, raw: str):
        with pytest.raises(ValidationError) as exc_info:
            canonical_filename(raw)
        assert exc_info.value.reason == "invalid_filename"

    @pytest.mark.parametrize("raw", [None, "", "   ", "..", "a\x00b.png", "uploads/"])
    def test_rejects_empty_or_broken_names(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            canonical_filename(raw)
        assert exc_info.value.reason == "invalid_filename"

    @pytest.mark.parametrize("raw", ["../../etc/passwd.png", "C:\\Users\\me\\passwd.png", "/abs/passwd.png"])
    def test_strips_directory_components(self, raw: str):
        assert canonical_filename(raw) == "passwd.png"


class TestKeyGeneration:
    """Tests for generated filenames and storage keys."""

    def test_generated_filename_shape(self):
        name = generate_filename(".JPG")
        stamp, rest = name.split("_")
        random_part, ext = rest.split(".")
        assert stamp.isdigit() and len(stamp) >= 13
        assert len(random_part) == 16
        int(random_part, 16)
        assert ext == "jpg"

    def test_generate_rejects_unknown_extension(self):
        with pytest.raises(ValidationError) as exc_info:
            generate_filename(".exe")
        assert exc_info.value.reason == "invalid_filename"

    def test_keys_start_with_prefix_and_are_distinct(self):
        """100,000 generated keys all carry the prefix and never repeat."""
        keys = [build_storage_key(generate_filename(".png"), "uploads/") for _ in range(100_000)]
        assert all(key.startswith("uploads/") for key in keys)
        assert len(set(keys)) == len(keys)


class TestCategories:
    @pytest.mark.parametrize(
        "content_type,category,label",
        [
            ("image/png", "image", "Image"),
            ("video/quicktime", "video", "Video"),
            ("audio/ogg", "audio", "Audio"),
            ("application/msword", "document", "Document"),
            ("text/plain", "file", "File"),
            (None, "file", "File"),
        ],
    )
    def test_category(self, content_type, category, label):
        assert file_category(content_type) == category
        assert category_label(content_type) == label

    @pytest.mark.parametrize(
        "content_type,expected",
        [
            ("image/jpeg", True),
            ("image/webp", True),
            ("application/pdf", True),
            ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", False),
            ("application/msword", False),
            ("video/mp4", False),
            ("audio/mpeg", False),
        ],
    )
    def test_previewable(self, content_type: str, expected: bool):
        assert is_previewable(content_type) is expected
