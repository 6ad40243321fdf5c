import random
import threading

from stickytodo.exceptions import InvariantViolationError
from tests.helpers import assert_dense_positions

THREADS = 6
ROUNDS = 40


def hammer(store, seed, errors, start):
    rng = random.Random(seed)
    start.wait()
    for i in range(ROUNDS):
        try:
            todos = store.read_all()
            ids = [t.id for t in todos]
            op = rng.choice(["create", "create", "move", "move", "delete", "complete"])
            if op == "create" or not ids:
                parent = rng.choice(ids + [None, None]) if ids else None
                store.create(f"t{seed}-{i}", parent)
            elif op == "move":
                todo_id = rng.choice(ids)
                parent = rng.choice(ids + [None])
                siblings = [t for t in todos if t.parent_id == parent and t.id != todo_id]
                store.move(todo_id, parent, rng.randint(0, len(siblings)))
            elif op == "delete":
                store.delete(rng.choice(ids))
            else:
                store.set_completed(rng.choice(ids), rng.random() < 0.7)
        except InvariantViolationError:
            # another thread changed the tree after this snapshot was read
            pass
        except Exception as e:
            errors.append(e)


def test_concurrent_mutations_keep_tree_consistent(store, db):
    for text in "ABC":
        store.create(text)

    errors = []
    start = threading.Event()
    workers = [
        threading.Thread(target=hammer, args=(store, seed, errors, start))
        for seed in range(THREADS)
    ]
    for worker in workers:
        worker.start()
    start.set()
    for worker in workers:
        worker.join(timeout=60)

    assert not any(worker.is_alive() for worker in workers)
    assert errors == []

    todos = store.read_all()
    assert_dense_positions(todos)

    dangling = db.query(
        "SELECT COUNT(*) FROM todos WHERE parent_id IS NOT NULL AND parent_id NOT IN (SELECT id FROM todos)"
    )
    assert dangling[0][0] == 0

    children = {}
    for todo in todos:
        children.setdefault(todo.parent_id, []).append(todo)
    for todo in todos:
        kids = children.get(todo.id)
        if kids:
            assert todo.completed == all(k.completed for k in kids), f"todo {todo.id} disagrees with its children"
