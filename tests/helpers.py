def positions_by_parent(todos):
    groups = {}
    for todo in todos:
        groups.setdefault(todo.parent_id, []).append(todo.position)
    return {parent: sorted(found) for parent, found in groups.items()}


def ordered_texts(todos, parent_id=None):
    siblings = [t for t in todos if t.parent_id == parent_id]
    return [t.text for t in sorted(siblings, key=lambda t: t.position)]


def assert_dense_positions(todos):
    for parent, found in positions_by_parent(todos).items():
        assert found == list(range(len(found))), f"gap or duplicate under parent {parent}: {found}"
