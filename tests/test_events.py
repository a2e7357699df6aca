from webwatcher.events import LABEL_WIDTH, MutationEvent, MutationKind, label_width


def test_five_kinds_with_audit_labels():
    assert [kind.value for kind in MutationKind] == ["add", "change", "unlink", "addDir", "unlinkDir"]


def test_label_width_is_longest_label():
    assert LABEL_WIDTH == len("UNLINKDIR")
    assert label_width([MutationKind.CREATED, MutationKind.MODIFIED]) == len("CHANGE")


def test_only_content_kinds_need_settling():
    settled = {kind for kind in MutationKind if kind.needs_settling}
    assert settled == {MutationKind.CREATED, MutationKind.MODIFIED}


def test_directory_kinds():
    assert MutationKind.DIRECTORY_CREATED.is_directory
    assert MutationKind.DIRECTORY_REMOVED.is_directory
    assert not MutationKind.REMOVED.is_directory


def test_events_are_values():
    assert MutationEvent(MutationKind.CREATED, "/a") == MutationEvent(MutationKind.CREATED, "/a")
