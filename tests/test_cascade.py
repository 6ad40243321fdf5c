def completed(store, todo_id):
    return store.get(todo_id).completed


def test_parent_completes_only_with_last_child(store):
    parent = store.create("parent")
    children = [store.create(f"c{i}", parent) for i in range(3)]

    store.set_completed(children[0], True)
    assert not completed(store, parent)
    store.set_completed(children[1], True)
    assert not completed(store, parent)
    store.set_completed(children[2], True)
    assert completed(store, parent)

    store.set_completed(children[1], False)
    assert not completed(store, parent)
    assert completed(store, children[0])
    assert completed(store, children[2])


def test_completing_parent_completes_all_descendants(store):
    a = store.create("A")
    b = store.create("B", a)
    c = store.create("C", b)
    d = store.create("D", a)

    store.set_completed(a, True)
    assert all(completed(store, i) for i in (a, b, c, d))

    store.set_completed(a, False)
    assert not any(completed(store, i) for i in (a, b, c, d))


def test_cascade_reaches_grandparent_through_parent_rule(store):
    grandparent = store.create("grandparent")
    parent = store.create("parent", grandparent)
    uncle = store.create("uncle", grandparent)
    leaf_1 = store.create("leaf 1", parent)
    leaf_2 = store.create("leaf 2", parent)

    store.set_completed(uncle, True)
    store.set_completed(leaf_1, True)
    assert not completed(store, parent)
    assert not completed(store, grandparent)

    store.set_completed(leaf_2, True)
    assert completed(store, parent)
    assert completed(store, grandparent)

    store.set_completed(leaf_1, False)
    assert not completed(store, parent)
    assert not completed(store, grandparent)
    assert completed(store, uncle)


def test_unrelated_trees_are_untouched(store):
    a = store.create("A")
    child = store.create("child", a)
    other = store.create("other")

    store.set_completed(child, True)

    assert completed(store, a)
    assert not completed(store, other)


def test_set_completed_on_missing_todo_is_a_noop(store):
    assert store.set_completed(5, True) is False


def test_deleting_only_child_keeps_parent_completed(store):
    a = store.create("A")
    c = store.create("C", a)
    store.set_completed(c, True)
    assert completed(store, a)

    store.delete(c)

    assert completed(store, a)
    # childless again: a plain checkbox
    store.set_completed(a, False)
    assert not completed(store, a)


def test_deleting_last_open_child_completes_parent(store):
    a = store.create("A")
    done = store.create("done", a)
    still_open = store.create("open", a)
    store.set_completed(done, True)
    assert not completed(store, a)

    store.delete(still_open)

    assert completed(store, a)


def test_adding_child_unchecks_completed_parent(store):
    a = store.create("A")
    b = store.create("B", a)
    store.set_completed(b, True)
    assert completed(store, a)

    store.create("new", b)

    assert not completed(store, b)
    assert not completed(store, a)


def test_moving_open_child_in_unchecks_new_parent(store):
    target = store.create("target")
    done_child = store.create("done", target)
    store.set_completed(done_child, True)
    loose = store.create("loose")
    assert completed(store, target)

    store.move(loose, target, 1)

    assert not completed(store, target)


def test_moving_open_child_out_completes_old_parent(store):
    source = store.create("source")
    done_child = store.create("done", source)
    open_child = store.create("open", source)
    store.set_completed(done_child, True)
    assert not completed(store, source)

    store.move(open_child, None, 0)

    assert completed(store, source)


def test_reset_all_unchecks_everything(store):
    a = store.create("A")
    store.create("B", a)
    c = store.create("C")
    store.set_counter(c, 2)
    store.decrement(c)
    store.set_completed(a, True)
    store.set_completed(c, True)

    assert store.reset_all() == 3

    todos = store.read_all()
    assert not any(t.completed for t in todos)
    assert store.get(c).current_count == 2
    assert [t.text for t in todos] == ["A", "C", "B"]
