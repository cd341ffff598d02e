"""
credstore - Self-Tests

Run with: python test_simple.py   (or: pytest)

Covers the persistence and authentication round trip:
- Password policy (strictly longer than 8)
- Add/get/has/delete/list semantics, duplicates included
- Save/load round trip through a fresh Vault
- Authentication gate against the compressed master file
- Scratch files never left behind, even when the codec fails
- Typed errors for missing files and malformed lines
- Hardened mode (hashed master entry, sealed credential file)
"""

import errno
import io
import os
import tempfile
from contextlib import redirect_stdout
from unittest import mock

from credstore import cli, config, crypto, storage
from credstore.auth import AuthenticationGate, AuthState
from credstore.codec import CodecAdapter
from credstore.errors import (
    CodecError,
    FileAccessError,
    FilePermissionError,
    InvalidRecordFormat,
    MissingFileError,
    ServiceNotFoundError,
    TamperedFileError,
    UserExistsError,
    VaultLockedError,
    WeakPasswordError,
)
from credstore.huffman import HuffmanCodec
from credstore.models import CredentialRecord, MasterCredentialEntry
from credstore.store import CredentialStore
from credstore.vault import Vault


class FailingCodec:
    """Codec that reports failure for everything."""

    def compress(self, input_path, output_path):
        return False

    def decompress(self, input_path, output_path):
        return False


class ExplodingCodec:
    """Codec that crashes instead of returning a result."""

    def compress(self, input_path, output_path):
        raise RuntimeError("codec crashed")

    def decompress(self, input_path, output_path):
        raise RuntimeError("codec crashed")


def new_unlocked_vault(directory, username="alice", master="hunter2pass", **kwargs):
    vault = Vault(username, directory=directory, **kwargs)
    vault.register(master)
    assert vault.unlock(master), "Registered user should unlock"
    return vault


def test_password_policy():
    """Passwords of 8 characters or fewer are rejected, 9+ accepted."""
    print("Testing Password Policy...")

    store = CredentialStore("alice")
    for weak in ("", "short", "12345678"):
        try:
            store.add("github", "alice", weak)
        except WeakPasswordError:
            pass
        else:
            raise AssertionError(f"{weak!r} should be rejected")
        assert len(store) == 0, "Store should be unchanged after a rejected add"
    print("  [OK] Passwords of length <= 8 rejected")

    store.add("github", "alice", "123456789")
    assert store.get("github") == "alice:123456789"
    print("  [OK] Password of length 9 accepted")


def test_basic_scenario():
    """add -> get -> has -> delete -> has."""
    print("Testing Basic Scenario...")

    with tempfile.TemporaryDirectory() as tmp:
        vault = new_unlocked_vault(tmp)

        vault.add("github", "alice", "Sup3rSecret!")
        assert vault.get("github") == "alice:Sup3rSecret!"
        assert vault.has("github")
        print("  [OK] Add/get/has works")

        vault.delete("github")
        assert not vault.has("github")
        assert vault.get("github") is None, "Missing service should return None, not raise"
        print("  [OK] Delete works")


def test_duplicate_services():
    """Duplicates are appended; get sees the first, delete removes all."""
    print("Testing Duplicate Service Names...")

    store = CredentialStore("alice")
    store.add("github", "first", "password-one")
    store.add("gitlab", "other", "password-two")
    store.add("github", "second", "password-three")

    assert len(store) == 3
    assert store.get("github") == "first:password-one", "get should return the first match"
    assert [row[1] for row in store.list_all()] == ["first", "other", "second"]
    print("  [OK] Duplicates kept in order")

    removed = store.delete("github")
    assert removed == 2, "delete should remove every match"
    assert [r.service_name for r in store.records()] == ["gitlab"]
    print("  [OK] Delete removes all matches")


def test_delete_missing_service():
    """Deleting an absent service raises and changes nothing."""
    print("Testing Delete of Missing Service...")

    with tempfile.TemporaryDirectory() as tmp:
        vault = new_unlocked_vault(tmp)
        vault.add("github", "alice", "Sup3rSecret!")
        with open(vault.credential_path, "rb") as f:
            before = f.read()

        try:
            vault.delete("nope")
        except ServiceNotFoundError as e:
            assert e.service_name == "nope"
        else:
            raise AssertionError("Should raise ServiceNotFoundError")

        assert vault.records() == (CredentialRecord("github", "alice:Sup3rSecret!"),)
        with open(vault.credential_path, "rb") as f:
            assert f.read() == before, "File should be unchanged"
        print("  [OK] ServiceNotFoundError, store and file unchanged")


def test_list_all():
    """list_all yields (service, username, password) and can be re-iterated."""
    print("Testing list_all...")

    store = CredentialStore("alice")
    store.add("github", "alice", "Sup3rSecret!")
    store.add("mail", "alice@example.com", "an0ther-one")

    listing = store.list_all()
    expected = [
        ("github", "alice", "Sup3rSecret!"),
        ("mail", "alice@example.com", "an0ther-one"),
    ]
    assert list(listing) == expected
    assert list(listing) == expected, "Listing should be restartable"
    assert len(listing) == 2

    store.add("bank", "alice", "b4nk-password")
    assert len(list(listing)) == 2, "Listing is a snapshot"
    print("  [OK] Listing works")


def test_round_trip():
    """Records saved by one vault load identically in a fresh one."""
    print("Testing Save/Load Round Trip...")

    with tempfile.TemporaryDirectory() as tmp:
        vault = new_unlocked_vault(tmp)
        vault.add("github", "alice", "Sup3rSecret!")
        vault.add("mail", "alice@example.com", "an0ther-one")
        vault.add("github", "alt", "duplicate-pass")
        vault.add("bank", "alice", "b4nk-password")
        vault.delete("mail")
        expected = vault.records()

        fresh = Vault("alice", directory=tmp)
        assert fresh.unlock("hunter2pass")
        assert fresh.records() == expected, "Order and content should survive a reload"

        with open(vault.credential_path, encoding="utf-8") as f:
            assert f.read() == (
                "github alice:Sup3rSecret!\n"
                "github alt:duplicate-pass\n"
                "bank alice:b4nk-password\n"
            )
        print("  [OK] Round trip preserves ordered records")


def test_authentication_gate():
    """Only an exact (username, password) match authenticates."""
    print("Testing Authentication Gate...")

    with tempfile.TemporaryDirectory() as tmp:
        master = storage.master_file_path(tmp)
        adapter = CodecAdapter()
        storage.save_master_entries(master, [MasterCredentialEntry("alice", "hunter2pass")], adapter)

        gate = AuthenticationGate(master, adapter)
        assert gate.state is AuthState.UNAUTHENTICATED
        assert gate.authenticate("alice", "hunter2pass") is AuthState.AUTHENTICATED
        assert gate.is_authenticated and gate.username == "alice"
        print("  [OK] Correct credentials authenticate")

        for username, password in (("alice", "wrong"), ("bob", "hunter2pass"), ("alice", "hunter2pas")):
            gate = AuthenticationGate(master, adapter)
            assert gate.authenticate(username, password) is AuthState.UNAUTHENTICATED
            assert not gate.is_authenticated
        print("  [OK] Wrong user or password stays unauthenticated")


def test_unlock_wrong_password():
    print("Testing Unlock With Wrong Password...")

    with tempfile.TemporaryDirectory() as tmp:
        Vault("alice", directory=tmp).register("hunter2pass")
        vault = Vault("alice", directory=tmp)
        assert not vault.unlock("not-the-password")
        assert not vault.is_unlocked
        try:
            vault.get("github")
        except VaultLockedError:
            print("  [OK] Locked vault refuses operations")
        else:
            raise AssertionError("Should raise VaultLockedError")


def test_multiple_users():
    """Registering a second user keeps the first one's master entry."""
    print("Testing Multiple Master Entries...")

    with tempfile.TemporaryDirectory() as tmp:
        Vault("alice", directory=tmp).register("hunter2pass")
        Vault("bob", directory=tmp).register("b0bs-password")

        entries = storage.load_master_entries(storage.master_file_path(tmp), CodecAdapter())
        assert [e.username for e in entries] == ["alice", "bob"]

        assert Vault("alice", directory=tmp).unlock("hunter2pass")
        assert Vault("bob", directory=tmp).unlock("b0bs-password")
        assert not Vault("bob", directory=tmp).unlock("hunter2pass")
        print("  [OK] Both users authenticate independently")

        try:
            Vault("alice", directory=tmp).register("another-password")
        except UserExistsError:
            print("  [OK] Duplicate registration rejected")
        else:
            raise AssertionError("Should raise UserExistsError")


def test_register_validation():
    print("Testing Registration Validation...")

    with tempfile.TemporaryDirectory() as tmp:
        try:
            Vault("alice", directory=tmp).register("short")
        except WeakPasswordError:
            pass
        else:
            raise AssertionError("Weak master password should be rejected")

        try:
            Vault("alice", directory=tmp).register("has,a,comma")
        except InvalidRecordFormat:
            pass
        else:
            raise AssertionError("Comma in master password should be rejected")

        assert os.listdir(tmp) == [], "Nothing should be written on rejected registration"
        print("  [OK] Invalid master credentials rejected before any write")


def test_scratch_files_cleaned_up():
    """No scratch file survives save/load/authenticate, even on codec failure."""
    print("Testing Scratch File Cleanup...")

    with tempfile.TemporaryDirectory() as tmp:
        # Compression fails
        for codec in (FailingCodec(), ExplodingCodec()):
            try:
                Vault("alice", directory=tmp, codec=codec).register("hunter2pass")
            except CodecError:
                pass
            else:
                raise AssertionError("Should raise CodecError")
            assert os.listdir(tmp) == [], f"Leftover files: {os.listdir(tmp)}"
        print("  [OK] Compression failure leaves no files")

        # Successful save + load
        vault = new_unlocked_vault(tmp)
        vault.add("github", "alice", "Sup3rSecret!")
        expected = sorted([config.MASTER_FILE_NAME, "alice" + config.CREDENTIAL_FILE_SUFFIX])
        assert sorted(os.listdir(tmp)) == expected, f"Unexpected files: {os.listdir(tmp)}"
        print("  [OK] Successful round trip leaves only the real files")

        # Decompression fails
        for codec in (FailingCodec(), ExplodingCodec()):
            try:
                Vault("alice", directory=tmp, codec=codec).unlock("hunter2pass")
            except CodecError:
                pass
            else:
                raise AssertionError("Should raise CodecError")
            assert sorted(os.listdir(tmp)) == expected, f"Unexpected files: {os.listdir(tmp)}"
        print("  [OK] Decompression failure leaves no scratch files")

        # Failing re-save keeps the previous master file intact
        master = storage.master_file_path(tmp)
        with open(master, "rb") as f:
            before = f.read()
        try:
            storage.save_master_entries(master, [MasterCredentialEntry("x", "y")], CodecAdapter(FailingCodec()))
        except CodecError:
            pass
        with open(master, "rb") as f:
            assert f.read() == before, "Master file should be untouched"
        print("  [OK] Failed compression does not clobber the master file")


def test_missing_files():
    print("Testing Missing File Errors...")

    with tempfile.TemporaryDirectory() as tmp:
        path = storage.credential_file_path(tmp, "nobody")
        try:
            storage.load_credentials(path)
        except MissingFileError as e:
            assert isinstance(e, FileAccessError)
            assert e.path == path and e.mode == "read"
        else:
            raise AssertionError("Should raise MissingFileError")
        print("  [OK] Missing credential file reported as MissingFileError")

        try:
            Vault("alice", directory=tmp).unlock("hunter2pass")
        except MissingFileError as e:
            assert e.path == storage.master_file_path(tmp)
        else:
            raise AssertionError("Unlock without a master file should raise MissingFileError")
        print("  [OK] Missing master file reported as MissingFileError")


def test_first_time_user_starts_empty():
    print("Testing First-Time User...")

    with tempfile.TemporaryDirectory() as tmp:
        vault = new_unlocked_vault(tmp)
        assert vault.is_unlocked
        assert vault.records() == ()
        assert not os.path.exists(vault.credential_path), "No file until the first change"
        print("  [OK] Unlock without a credential file gives an empty store")


def test_malformed_credential_file():
    """Malformed lines fail the load with the line number."""
    print("Testing Malformed Credential Lines...")

    with tempfile.TemporaryDirectory() as tmp:
        path = storage.credential_file_path(tmp, "alice")
        cases = {
            "github alice:Sup3rSecret!\nbrokenline\n": 2,
            "github alice:pw:extra\n": 1,
            "github alicenoseparator\n": 1,
            "\ngithub alice:Sup3rSecret! extra\n": 2,
        }
        for text, line_number in cases.items():
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
            try:
                storage.load_credentials(path)
            except InvalidRecordFormat as e:
                assert e.path == path
                assert e.line_number == line_number, f"{text!r}: got line {e.line_number}"
            else:
                raise AssertionError(f"{text!r} should fail to load")
        print("  [OK] Malformed lines raise InvalidRecordFormat with line numbers")

        with open(path, "w", encoding="utf-8") as f:
            f.write("github alice:Sup3rSecret!\n\n   \nmail bob:an0ther-one\n")
        records = storage.load_credentials(path)
        assert [r.service_name for r in records] == ["github", "mail"]
        print("  [OK] Blank lines are skipped")


def test_malformed_master_file():
    print("Testing Malformed Master File...")

    with tempfile.TemporaryDirectory() as tmp:
        text_path = os.path.join(tmp, "plain.txt")
        with open(text_path, "w", encoding="utf-8") as f:
            f.write("alice,hunter2pass\nbob\n")
        master = storage.master_file_path(tmp)
        assert HuffmanCodec().compress(text_path, master)
        os.remove(text_path)

        gate = AuthenticationGate(master, CodecAdapter())
        try:
            gate.authenticate("alice", "hunter2pass")
        except InvalidRecordFormat as e:
            assert e.line_number == 2
        else:
            raise AssertionError("Should raise InvalidRecordFormat")
        assert os.listdir(tmp) == [config.MASTER_FILE_NAME]
        print("  [OK] Malformed master line detected, scratch removed")


def test_unstorable_fields_rejected():
    print("Testing Unstorable Fields...")

    store = CredentialStore("alice")
    for args in (
        ("", "alice", "Sup3rSecret!"),
        ("my service", "alice", "Sup3rSecret!"),
        ("github", "alice smith", "Sup3rSecret!"),
        ("github", "alice", "Sup3r Secret!"),
        ("github", "ali:ce", "Sup3rSecret!"),
        ("github", "alice", "Sup3r:Secret!"),
    ):
        try:
            store.add(*args)
        except InvalidRecordFormat:
            pass
        else:
            raise AssertionError(f"{args!r} should be rejected")
    assert len(store) == 0
    print("  [OK] Fields the line format cannot carry are rejected")


def test_failed_save_leaves_store_unchanged():
    print("Testing Failed Save...")

    def broken_persist(records):
        raise FileAccessError("/nowhere/alice_passwords.dat", "write", "disk full")

    store = CredentialStore("alice")
    store.replace_all([CredentialRecord("github", "alice:Sup3rSecret!")])
    store._persist = broken_persist

    for action in (lambda: store.add("mail", "alice", "an0ther-one"), lambda: store.delete("github")):
        try:
            action()
        except FileAccessError:
            pass
        else:
            raise AssertionError("Should propagate FileAccessError")
        assert store.records() == (CredentialRecord("github", "alice:Sup3rSecret!"),)
    print("  [OK] In-memory store unchanged after failed save")


def test_failed_write_keeps_file_on_disk():
    print("Testing Failed Write On Disk...")

    with tempfile.TemporaryDirectory() as tmp:
        vault = new_unlocked_vault(tmp)
        vault.add("github", "alice", "Sup3rSecret!")
        with open(vault.credential_path, "rb") as f:
            before = f.read()

        failure = OSError(errno.EIO, "I/O error")
        with mock.patch.object(storage.os, "replace", side_effect=failure):
            try:
                vault.add("mail", "alice", "an0ther-one")
            except FileAccessError as e:
                assert e.mode == "write"
                assert e.path == vault.credential_path
            else:
                raise AssertionError("Should raise FileAccessError")

        with open(vault.credential_path, "rb") as f:
            assert f.read() == before
        assert vault.records() == (CredentialRecord("github", "alice:Sup3rSecret!"),)
        assert not [name for name in os.listdir(tmp) if name.endswith(".tmp")]
        print("  [OK] Previous file intact and no temp file left after failed replace")


def test_unreadable_credential_file():
    print("Testing Unreadable Credential File...")

    if hasattr(os, "geteuid") and os.geteuid() == 0:
        print("  [SKIP] Permission bits are not enforced for root")
        return

    with tempfile.TemporaryDirectory() as tmp:
        path = storage.credential_file_path(tmp, "alice")
        storage.save_credentials(path, [CredentialRecord("github", "alice:Sup3rSecret!")])
        os.chmod(path, 0)
        try:
            try:
                storage.load_credentials(path)
            except FilePermissionError as e:
                assert e.mode == "read"
                assert e.path == path
            else:
                raise AssertionError("Should raise FilePermissionError")
        finally:
            os.chmod(path, 0o600)
        print("  [OK] Access denied raises FilePermissionError")


def test_hash_like_master_password():
    print("Testing Hash-Like Master Password...")

    with tempfile.TemporaryDirectory() as tmp:
        password = config.MASTER_HASH_SCHEME + "$hunter2pass"
        try:
            Vault("alice", directory=tmp).register(password)
        except InvalidRecordFormat:
            pass
        else:
            raise AssertionError("Plain mode should reject a hash-like master password")
        assert not os.path.exists(storage.master_file_path(tmp))
        print("  [OK] Plain mode refuses a password that reads back as a hash")

        Vault("alice", directory=tmp, protect_at_rest=True).register(password)
        assert Vault("alice", directory=tmp, protect_at_rest=True).unlock(password)
        print("  [OK] Hardened mode stores and unlocks it")


def test_username_stays_inside_directory():
    print("Testing Username As File Name...")

    with tempfile.TemporaryDirectory() as tmp:
        inner = os.path.join(tmp, "vault")
        os.makedirs(inner)
        for name in ("../escaped", os.path.join("a", "b"), ".", "..", ""):
            try:
                Vault(name, directory=inner)
            except InvalidRecordFormat:
                pass
            else:
                raise AssertionError(f"{name!r} should be rejected")

        vault = Vault("alice", directory=inner)
        assert os.path.dirname(vault.credential_path) == inner
        assert sorted(os.listdir(tmp)) == ["vault"]
        assert os.listdir(inner) == []
        print("  [OK] Usernames with path parts are rejected")


def test_password_generation():
    print("Testing Password Generation...")

    pwd = crypto.generate_password(20)
    assert len(pwd) == 20
    assert all(c in config.GENERATOR_ALPHABET for c in pwd)
    assert len(crypto.generate_password()) == config.DEFAULT_GENERATED_LENGTH

    for bad in (0, -3):
        try:
            crypto.generate_password(bad)
        except ValueError:
            pass
        else:
            raise AssertionError(f"length {bad} should be rejected")
    print("  [OK] Generator works")

    with tempfile.TemporaryDirectory() as tmp:
        vault = new_unlocked_vault(tmp)
        generated = vault.add_generated("github", "alice", 24)
        assert vault.get("github") == "alice:" + generated
        try:
            vault.add_generated("short", "alice", 8)
        except WeakPasswordError:
            pass
        else:
            raise AssertionError("8-character generated password should be rejected")
        assert not vault.has("short")
        print("  [OK] Generated password stored")


def test_protect_at_rest():
    """Hardened mode: hashed master entry, sealed credential file."""
    print("Testing Hardened Mode...")

    with tempfile.TemporaryDirectory() as tmp:
        vault = new_unlocked_vault(tmp, protect_at_rest=True)
        vault.add("github", "alice", "Sup3rSecret!")

        entries = storage.load_master_entries(storage.master_file_path(tmp), CodecAdapter())
        assert crypto.is_hashed_master_password(entries[0].password)
        assert "hunter2pass" not in entries[0].password
        print("  [OK] Master password stored as scrypt hash")

        with open(vault.credential_path, "rb") as f:
            blob = f.read()
        assert blob.startswith(config.SEALED_MAGIC)
        assert b"Sup3rSecret!" not in blob
        print("  [OK] Credential file sealed")

        fresh = Vault("alice", directory=tmp, protect_at_rest=True)
        assert fresh.unlock("hunter2pass")
        assert fresh.get("github") == "alice:Sup3rSecret!"
        assert not Vault("alice", directory=tmp, protect_at_rest=True).unlock("wrong-password")
        print("  [OK] Sealed round trip works")

        try:
            Vault("alice", directory=tmp).unlock("hunter2pass")
        except TamperedFileError:
            print("  [OK] Sealed file refused without hardened mode")
        else:
            raise AssertionError("Plain vault should not read a sealed file")

        tampered = bytearray(blob)
        tampered[-1] ^= 1
        with open(vault.credential_path, "wb") as f:
            f.write(bytes(tampered))
        try:
            Vault("alice", directory=tmp, protect_at_rest=True).unlock("hunter2pass")
        except TamperedFileError:
            print("  [OK] Tampering detected")
        else:
            raise AssertionError("Tampered file should be rejected")

def test_cli_flow():
    """register -> add -> list -> get -> delete through the command line."""
    print("Testing Command Line...")

    assert cli.format_table([]) == "No passwords stored."
    table = cli.format_table([("github", "alice", "Sup3rSecret!")])
    assert table.splitlines()[0].startswith("Service             Username")
    assert table.splitlines()[2] == f"{'github':<20}{'alice':<20}Sup3rSecret!"
    print("  [OK] Table formatting works")

    with tempfile.TemporaryDirectory() as tmp:
        base = ["--verbose", "--dir", tmp]

        def run(argv, prompts):
            out = io.StringIO()
            with mock.patch("getpass.getpass", side_effect=prompts), redirect_stdout(out):
                code = cli.main(base + argv)
            return code, out.getvalue()

        assert run(["register", "alice"], ["hunter2pass", "hunter2pass"])[0] == 0
        assert run(["add", "alice", "github", "alice-gh"], ["hunter2pass", "Sup3rSecret!"])[0] == 0

        code, output = run(["list", "alice"], ["hunter2pass"])
        assert code == 0 and "Sup3rSecret!" in output

        code, output = run(["get", "alice", "github"], ["hunter2pass"])
        assert code == 0 and "alice-gh" in output and "Sup3rSecret!" in output

        code, output = run(["add", "alice", "mail", "alice"], ["hunter2pass", "short"])
        assert code == 1 and output.startswith("ERROR:")

        code, output = run(["get", "alice", "github"], ["wrong-password"])
        assert code == 1 and "Invalid username or master password" in output

        assert run(["delete", "alice", "github"], ["hunter2pass"])[0] == 0
        code, output = run(["list", "alice"], ["hunter2pass"])
        assert "No passwords stored." in output
        print("  [OK] Command line round trip works")


def test_cli_log_file_in_vault_dir():
    print("Testing Command Line Log File...")

    with tempfile.TemporaryDirectory() as tmp:
        vault_dir = os.path.join(tmp, "vault")
        with mock.patch("credstore.cli.setup_logging") as setup, redirect_stdout(io.StringIO()):
            assert cli.main(["--dir", vault_dir, "generate", "--length", "12"]) == 0
        assert setup.call_args[0][1] == os.path.join(vault_dir, config.LOG_FILE)
        assert os.path.isdir(vault_dir)
        print("  [OK] Log file goes into the vault directory")


def run_all_tests():
    """Run all tests."""
    print("=" * 70)
    print("credstore - Test Suite")
    print("=" * 70)
    print()

    tests = [
        test_password_policy,
        test_basic_scenario,
        test_duplicate_services,
        test_delete_missing_service,
        test_list_all,
        test_round_trip,
        test_authentication_gate,
        test_unlock_wrong_password,
        test_multiple_users,
        test_register_validation,
        test_scratch_files_cleaned_up,
        test_missing_files,
        test_first_time_user_starts_empty,
        test_malformed_credential_file,
        test_malformed_master_file,
        test_unstorable_fields_rejected,
        test_failed_save_leaves_store_unchanged,
        test_failed_write_keeps_file_on_disk,
        test_unreadable_credential_file,
        test_hash_like_master_password,
        test_username_stays_inside_directory,
        test_password_generation,
        test_protect_at_rest,
        test_cli_flow,
        test_cli_log_file_in_vault_dir,
    ]

    failed = []

    for test in tests:
        try:
            test()
            print()
        except Exception as e:
            print(f"  [FAIL] TEST FAILED: {e}")
            failed.append((test.__name__, e))
            print()

    print("=" * 70)
    if not failed:
        print("[OK] ALL TESTS PASSED!")
    else:
        print(f"[FAIL] {len(failed)} TESTS FAILED:")
        for name, error in failed:
            print(f"  - {name}: {error}")
    print("=" * 70)

    return len(failed) == 0


if __name__ == "__main__":
    import sys
    success = run_all_tests()
    sys.exit(0 if success else 1)
