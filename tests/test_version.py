from octavox.version import version_info


def test_default_release_numbers():
    info = version_info()
    assert info.version == "0.30"
    assert (info.major, info.minor, info.extra) == (0, 30, "")


def test_default_interface_numbers():
    info = version_info()
    assert info.lt_major == 7
    assert info.lt_minor == 4
    assert info.lt_bug == 0


def test_extra_suffix_kept():
    info = version_info("1.2rc1", (3, 1, 2))
    assert (info.major, info.minor, info.extra) == (1, 2, "rc1")


def test_interface_numbers_reconstruct_triple():
    current, revision, age = 20, 5, 6
    info = version_info("2.0", (current, revision, age))
    assert info.lt_major + info.lt_minor == current
    assert info.lt_bug == revision


def test_unparsable_version_gives_zeros():
    info = version_info("release", (1, 0, 0))
    assert (info.major, info.minor, info.extra) == (0, 0, "")
    assert info.version == "release"


def test_missing_minor_gives_zeros():
    info = version_info("5.", (1, 0, 0))
    assert (info.major, info.minor) == (0, 0)