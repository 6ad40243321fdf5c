def test_note_row_exists_after_initialisation(db):
    rows = db.query("SELECT id, content FROM notes")
    assert [(row["id"], row["content"]) for row in rows] == [(1, "")]


def test_save_note_overwrites(notes):
    notes.save_note("first")
    notes.save_note("second")
    assert notes.get_note() == "second"


def test_note_recreated_if_row_missing(db, notes):
    with db.transaction() as conn:
        conn.execute("DELETE FROM notes")
    assert notes.get_note() == ""
    notes.save_note("back again")
    assert notes.get_note() == "back again"
