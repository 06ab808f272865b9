# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pytest

import plainrsa
from plainrsa import __main__ as cli


@pytest.fixture
def keyfiles(tmp_path, textbook):
    """Textbook key pair written in the text format."""
    pub, priv = tmp_path / "key.pub", tmp_path / "key"
    plainrsa.write_key(plainrsa.RSAPubKey(textbook["n"], textbook["e"]), pub)
    plainrsa.write_key(plainrsa.RSAPrivKey(textbook["n"], textbook["e"], textbook["d"]), priv)
    return pub, priv


def test_keygen_encrypt_decrypt(tmp_path, capsys):
    pub, priv = tmp_path / "key.pub", tmp_path / "key"
    assert cli.main(["-n", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "512"]) == 0
    assert plainrsa.load_private_key(priv).pub == plainrsa.load_public_key(pub)
    capsys.readouterr()

    assert cli.main(["-n", "encrypt", "-p", str(pub), "--message", "hello world"]) == 0
    ciphertext = capsys.readouterr().out.strip()
    assert ciphertext.isdigit()

    assert cli.main(["-n", "decrypt", "-P", str(priv), "--message", ciphertext]) == 0
    assert capsys.readouterr().out == "hello world\n"


def test_keygen_pem(tmp_path):
    pub, priv = tmp_path / "key.pub", tmp_path / "key"
    assert cli.main(["-n", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "256", "--format", "pem"]) == 0
    assert pub.read_text(encoding="ascii").startswith("-----BEGIN RSA PUBLIC KEY-----")
    assert plainrsa.load_private_key(priv).p is not None


def test_keygen_refuses_overwrite(keyfiles, capsys):
    pub, priv = keyfiles
    before = priv.read_text(encoding="ascii")
    assert cli.main(["-n", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "64", "--pub-exponent", "17"]) == 1
    assert "already exists" in capsys.readouterr().err
    assert priv.read_text(encoding="ascii") == before


def test_keygen_overwrite(keyfiles):
    pub, priv = keyfiles
    assert cli.main(["-n", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "64", "--pub-exponent", "17",
                     "-o"]) == 0
    assert plainrsa.load_public_key(pub).mod.bit_length() == 64


def test_keygen_unworkable_size(tmp_path, capsys):
    pub, priv = tmp_path / "key.pub", tmp_path / "key"
    assert cli.main(["-n", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "8"]) == 1
    assert capsys.readouterr().err.startswith("Error: ")
    assert not pub.exists()
    assert not priv.exists()


def test_keygen_writes_both_or_neither(mocker, tmp_path):
    pub, priv = tmp_path / "key.pub", tmp_path / "key"
    mocker.patch("plainrsa.rsa.RSAPubKey.export", side_effect=OSError("read-only"))
    assert cli.main(["-n", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "64", "--pub-exponent", "17"]) == 1
    assert not priv.exists()
    assert list(tmp_path.iterdir()) == []


def test_keygen_failed_overwrite_keeps_old_pair(mocker, keyfiles):
    pub, priv = keyfiles
    before = (pub.read_text(encoding="ascii"), priv.read_text(encoding="ascii"))
    mocker.patch("plainrsa.rsa.RSAPubKey.export", side_effect=OSError("disk full"))
    assert cli.main(["-n", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "64", "--pub-exponent", "17",
                     "-o"]) == 1
    assert (pub.read_text(encoding="ascii"), priv.read_text(encoding="ascii")) == before
    assert sorted(tmp.name for tmp in pub.parent.iterdir()) == ["key", "key.pub"]


def test_encrypt_textbook(keyfiles, capsys):
    pub, _ = keyfiles
    assert cli.main(["-n", "encrypt", "-p", str(pub), "--message", "A"]) == 0
    assert capsys.readouterr().out == "2790\n"


def test_decrypt_textbook(keyfiles, capsys):
    _, priv = keyfiles
    assert cli.main(["-n", "decrypt", "-P", str(priv), "--message", "2790"]) == 0
    assert capsys.readouterr().out == "A\n"


def test_message_from_file(keyfiles, tmp_path, capsys):
    pub, priv = keyfiles
    (tmp_path / "plain.txt").write_text("A", encoding="utf-8")
    (tmp_path / "cipher.txt").write_text("2790\n", encoding="ascii")
    assert cli.main(["-n", "encrypt", "-p", str(pub), "--message", f"P:{tmp_path / 'plain.txt'}"]) == 0
    assert capsys.readouterr().out == "2790\n"
    assert cli.main(["-n", "decrypt", "-P", str(priv), "--message", f"P:{tmp_path / 'cipher.txt'}"]) == 0
    assert capsys.readouterr().out == "A\n"


@pytest.mark.parametrize("argv,expected", [
    (["encrypt", "--message", "AB"], "does not fit"),
    (["decrypt", "--message", "not-a-number"], "not a valid"),
    (["decrypt", "--message", "-5"], "not a valid"),
])
def test_reported_errors(keyfiles, capsys, argv, expected):
    pub, priv = keyfiles
    key_args = ["-p", str(pub)] if argv[0] == "encrypt" else ["-P", str(priv)]
    assert cli.main(["-n", argv[0]] + key_args + argv[1:]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert expected in err


def test_decrypt_with_public_key_file(keyfiles, capsys):
    pub, _ = keyfiles
    assert cli.main(["-n", "decrypt", "-P", str(pub), "--message", "2790"]) == 1
    assert "public key file" in capsys.readouterr().err


@pytest.mark.parametrize("mod", ["0", "1"])
def test_decrypt_degenerate_modulus(tmp_path, capsys, mod):
    priv = tmp_path / "key"
    priv.write_text(f"{mod}\n11\nac1\n", encoding="ascii")
    assert cli.main(["-n", "decrypt", "-P", str(priv), "--message", "5"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert "Invalid modulus" in err


def test_missing_key_file(tmp_path, capsys):
    assert cli.main(["-n", "encrypt", "-p", str(tmp_path / "nope"), "--message", "A"]) == 1
    assert "Could not read key" in capsys.readouterr().err


def test_non_interactive_missing_argument(capsys):
    assert cli.main(["-n", "encrypt", "--message", "A"]) == 1
    assert "public_key is missing" in capsys.readouterr().err


def test_interactive_prompts(mocker, keyfiles, capsys):
    pub, _ = keyfiles
    mocker.patch("builtins.input", side_effect=["encrypt", str(pub), "A"])
    assert cli.main([]) == 0
    out = capsys.readouterr().out
    assert "Please specify the subcommand!" in out
    assert "2790" in out


def test_prompt_retries(mocker):
    mocker.patch("builtins.input", side_effect=["", "abc", "512", "Q", "N"])
    prntr = mocker.Mock()
    assert cli.prompt("keysize", False, False, prntr) == 2048
    assert cli.prompt("pub_exponent", False, True, prntr) == 512
    prntr.assert_any_call("We could not convert your value to int.")
    assert cli.prompt("overwrite", False, False, prntr) == "N"
    prntr.assert_any_call("Please select an option from the list.")


def test_prompt_defaults_without_asking(mocker):
    ask = mocker.patch("builtins.input")
    assert cli.prompt("encoding", False, False) == "utf-8"
    assert cli.prompt("keysize", True, False) == 2048
    ask.assert_not_called()
    with pytest.raises(IOError, match="non-interactive"):
        cli.prompt("message", True, False)
