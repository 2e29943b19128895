import paramiko

from scpdeck.domain.identity import inspect_identity


def _write_rsa_key(path, password=None):
    key = paramiko.RSAKey.generate(2048)
    key.write_private_key_file(str(path), password=password)
    with open(str(path) + ".pub", "w", encoding="utf-8") as public_file:
        public_file.write(f"{key.get_name()} {key.get_base64()}\n")
    return key


def test_plain_key(tmp_path):
    key = _write_rsa_key(tmp_path / "id_rsa")

    info = inspect_identity(str(tmp_path / "id_rsa"))

    assert info.readable
    assert info.key_type == "ssh-rsa"
    assert info.fingerprint == key.fingerprint
    assert info.encrypted is False


def test_encrypted_key_without_passphrase(tmp_path):
    _write_rsa_key(tmp_path / "id_rsa", password="hunter2")

    info = inspect_identity(str(tmp_path / "id_rsa"))

    assert info.encrypted is True
    assert info.readable
    assert info.key_type == "ssh-rsa"
    assert info.fingerprint is None


def test_encrypted_key_with_passphrase(tmp_path):
    key = _write_rsa_key(tmp_path / "id_rsa", password="hunter2")

    info = inspect_identity(str(tmp_path / "id_rsa"), "hunter2")

    assert info.encrypted is True
    assert info.fingerprint == key.fingerprint


def test_missing_and_garbage_files(tmp_path):
    (tmp_path / "junk").write_text("not a key")

    assert inspect_identity(str(tmp_path / "absent")).error == "file not found"
    assert inspect_identity(str(tmp_path / "junk")).error == "unsupported key format"
