import gzip
import os.path
import tarfile
import zipfile

import pytest

from cfn_packager.utils.archives import classify, create_zip_file_python, is_archive_file


def _create_zip(path, entries=None):
    with zipfile.ZipFile(path, "w") as zip_ref:
        for name, content in (entries or {"file.txt": "content"}).items():
            zip_ref.writestr(name, content)
    return str(path)


def test_zip_python(tmp_path):
    source = tmp_path / "source"
    (source / "sub").mkdir(parents=True)
    (source / "index.py").write_text("handler")
    (source / "sub" / "util.py").write_text("util")
    full_zip_path = tmp_path / "test.zip"

    create_zip_file_python(base_dir=source, zip_file=full_zip_path)

    with zipfile.ZipFile(full_zip_path) as zip_ref:
        assert sorted(zip_ref.namelist()) == ["index.py", "sub/util.py"]
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zip_ref.infolist())
        assert zip_ref.read("sub/util.py") == b"util"


class TestArchiveDetection:
    def test_zip_file(self, tmp_path):
        assert is_archive_file(_create_zip(tmp_path / "code.zip"))

    def test_jar_file_with_zip_signature(self, tmp_path):
        assert is_archive_file(_create_zip(tmp_path / "app.jar"))

    def test_gzip_file(self, tmp_path):
        path = tmp_path / "data.gz"
        with gzip.open(path, "wb") as f:
            f.write(b"content")
        assert is_archive_file(str(path))

    def test_tar_file(self, tmp_path):
        content = tmp_path / "content.txt"
        content.write_text("content")
        path = tmp_path / "data.tar"
        with tarfile.open(path, "w") as tar:
            tar.add(content, arcname="content.txt")
        assert is_archive_file(str(path))

    @pytest.mark.parametrize(
        "filename, header",
        [
            ("archive.rar", b"Rar!\x1a\x07\x00"),
            ("archive.7z", b"7z\xbc\xaf\x27\x1c\x00\x04"),
            ("archive.zst", b"\x28\xb5\x2f\xfd\x00\x00"),
        ],
    )
    def test_signatures(self, tmp_path, filename, header):
        path = tmp_path / filename
        path.write_bytes(header + b"\x00" * 16)
        assert is_archive_file(str(path))

    def test_misnamed_file_is_not_an_archive(self, tmp_path):
        path = tmp_path / "code.zip"
        path.write_text("print('not a zip file')")
        assert not is_archive_file(str(path))

    def test_extension_only_policy(self, tmp_path):
        path = tmp_path / "code.zip"
        path.write_text("print('not a zip file')")
        assert is_archive_file(str(path), signature_check=False)

    def test_unknown_extension_is_not_an_archive(self, tmp_path):
        # a zip file without archive extension is not treated as an archive
        assert not is_archive_file(_create_zip(tmp_path / "handler.py"))

    def test_missing_file(self, tmp_path):
        assert not is_archive_file(str(tmp_path / "missing.zip"))

    def test_extension_is_case_insensitive(self, tmp_path):
        assert is_archive_file(_create_zip(tmp_path / "CODE.ZIP"))


class TestClassify:
    def test_directory(self, tmp_path):
        result = classify(str(tmp_path))
        assert result.is_directory
        assert not result.is_file
        assert not result.is_archive

    def test_plain_file(self, tmp_path):
        path = tmp_path / "handler.py"
        path.write_text("code")
        result = classify(str(path))
        assert result.is_file
        assert not result.is_directory
        assert not result.is_archive

    def test_archive(self, tmp_path):
        result = classify(_create_zip(tmp_path / "code.zip"))
        assert result.is_file
        assert result.is_archive

    def test_missing_path(self, tmp_path):
        result = classify(os.path.join(tmp_path, "missing"))
        assert not any([result.is_file, result.is_directory, result.is_archive])
