import string

from src.notesync.security.ids import ALPHABET, generate_note_id


def test_alphabet_has_62_symbols():
    assert len(ALPHABET) == 62
    assert set(ALPHABET) == set(string.ascii_letters + string.digits)


def test_default_length_and_charset():
    note_id = generate_note_id()
    assert len(note_id) == 8
    assert all(ch in ALPHABET for ch in note_id)


def test_custom_length():
    assert len(generate_note_id(12)) == 12


def test_ids_differ():
    ids = {generate_note_id() for _ in range(200)}
    assert len(ids) == 200
