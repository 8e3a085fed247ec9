"""
Tests du stockage local des fichiers déposés.
"""

import io

import pytest

from app.config import settings
from app.exceptions import BadRequestError, InternalError
from app.services import file_service


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    return tmp_path / "uploads"


def test_save_file_identifiant_unique(upload_dir):
    first = file_service.save_file(b"a", "devoir.pdf")
    second = file_service.save_file(b"b", "devoir.pdf")

    assert first != second
    assert first.endswith("_devoir.pdf")
    assert (upload_dir / first).read_bytes() == b"a"


def test_save_file_retire_le_chemin_client(upload_dir):
    file_id = file_service.save_file(b"x", "../../etc/passwd")
    assert "/" not in file_id
    assert (upload_dir / file_id).exists()


def test_save_file_vide_refuse():
    with pytest.raises(BadRequestError) as exc:
        file_service.save_file(b"", "vide.txt")
    assert exc.value.code == "EMPTY_FILE"


def test_save_file_trop_volumineux(monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
    with pytest.raises(BadRequestError) as exc:
        file_service.save_file(b"x" * (1024 * 1024 + 1), "gros.bin")
    assert exc.value.code == "FILE_TOO_LARGE"


def test_read_upload_borne_a_la_taille_maximale(monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
    stream = io.BytesIO(b"x" * (3 * 1024 * 1024))

    content = file_service.read_upload(stream)

    assert len(content) == 1024 * 1024 + 1
    with pytest.raises(BadRequestError) as exc:
        file_service.save_file(content, "gros.bin")
    assert exc.value.code == "FILE_TOO_LARGE"


def test_read_upload_petit_fichier_complet():
    assert file_service.read_upload(io.BytesIO(b"abc")) == b"abc"


def test_original_name():
    assert file_service.original_name("0123abcd_mon_fichier.pdf") == "mon_fichier.pdf"


def test_resolve_path_refuse_la_sortie_du_dossier():
    with pytest.raises(BadRequestError):
        file_service.resolve_path("../secret.txt")


def test_open_stored_file_absent():
    with pytest.raises(InternalError) as exc:
        file_service.open_stored_file("inexistant_fichier.pdf")
    assert exc.value.code == "FILE_MISSING"


def test_delete_file(upload_dir):
    file_id = file_service.save_file(b"x", "a.txt")
    file_service.delete_file(file_id)
    assert not (upload_dir / file_id).exists()


def test_delete_file_absent_ou_vide_sans_erreur():
    file_service.delete_file("inexistant.txt")
    file_service.delete_file("")
    file_service.delete_file(None)
