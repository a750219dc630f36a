"""Random content-tree generation shared by the layout property tests."""
import random

from slide_compiler.models import Centre, Column, Padding, Row, Slide, Text


def random_tree(rng: random.Random, depth: int = 0):
    """Build a random content tree; leaves get more likely with depth."""
    if depth >= 4 or rng.random() < 0.25 + depth * 0.15:
        words = " ".join("word" for _ in range(rng.randint(1, 6)))
        return Text(words, size=rng.choice([None, 0, 8, 16, 48, 200]))

    choice = rng.choice(["centre", "padding", "row", "column"])
    if choice == "centre":
        return Centre(random_tree(rng, depth + 1))
    if choice == "padding":
        return Padding(random_tree(rng, depth + 1), amount=rng.choice([None, 0, 5, 40, 1000]))

    children = tuple(random_tree(rng, depth + 1) for _ in range(rng.randint(1, 4)))
    return Row(children) if choice == "row" else Column(children)


def random_slides(seed: int, count: int):
    rng = random.Random(seed)
    return [Slide(random_tree(rng)) for _ in range(count)]
