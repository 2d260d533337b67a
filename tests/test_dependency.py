from pacman_repo_builder.dependency import ReasonedDependency, UnreasonedDependency


def test_reasoned_new():
    actual = [
        ReasonedDependency.parse("foo>=3: Install for fun"),
        ReasonedDependency.parse("foo>=3"),
        ReasonedDependency.parse("foo: Install for fun"),
        ReasonedDependency.parse("foo"),
    ]
    expected = [
        ReasonedDependency("foo", ">=3", "Install for fun"),
        ReasonedDependency("foo", ">=3", None),
        ReasonedDependency("foo", "", "Install for fun"),
        ReasonedDependency("foo", "", None),
    ]
    assert actual == expected


def test_unreasoned_parse():
    assert UnreasonedDependency.parse("foo>=3") == UnreasonedDependency("foo", ">=3")
    assert UnreasonedDependency.parse("foo") == UnreasonedDependency("foo", "")


def test_round_trip_reason():
    dependency = UnreasonedDependency("foo", ">=3")
    reasoned = dependency.with_reason("Install for fun")
    assert reasoned == ReasonedDependency("foo", ">=3", "Install for fun")
    assert reasoned.without_reason() == dependency


def test_unreasoned_is_hashable():
    assert len({UnreasonedDependency("a", ""), UnreasonedDependency("a", "")}) == 1