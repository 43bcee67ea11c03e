"""
Simple tests to verify the library works correctly
"""

from unittest.mock import patch


def test_imports():
    """Test that all modules can be imported"""
    from wiki_mirror import WikiMirror
    from wiki_mirror.scraper import WikiMirror as MirrorClass
    from wiki_mirror.cli import main
    print("✓ All imports successful")


def test_mirror_initialization():
    """Test mirror can be initialized"""
    from wiki_mirror import WikiMirror

    mirror = WikiMirror("https://wiki.example.com/", "secret")
    assert mirror.host == "https://wiki.example.com"
    assert mirror.timeout is None
    assert mirror.save_markdown is False
    assert mirror.session.headers["X-Cbr-Authorization"] == "Bearer secret"

    mirror_with_options = WikiMirror(
        "https://wiki.example.com", "secret", timeout=5.0, save_markdown=True
    )
    assert mirror_with_options.timeout == 5.0
    assert mirror_with_options.save_markdown is True
    print("✓ Mirror initialization works")


def test_page_url_encoding():
    """Test page identifiers are percent-encoded like encodeURIComponent"""
    from wiki_mirror import WikiMirror

    mirror = WikiMirror("https://wiki.example.com", "secret")
    assert mirror.page_url("Home") == "https://wiki.example.com/api/v2/wiki/get-item/Home"
    assert mirror.page_url("My Page/Sub") == (
        "https://wiki.example.com/api/v2/wiki/get-item/My%20Page%2FSub"
    )
    assert mirror.page_url("a(b)!*'~") == (
        "https://wiki.example.com/api/v2/wiki/get-item/a(b)!*'~"
    )
    assert mirror.page_url("Сторінка").endswith("/%D0%A1%D1%82%D0%BE%D1%80%D1%96%D0%BD%D0%BA%D0%B0")
    print("✓ Page URL encoding works")


def test_sanitize_filename():
    """Test titles are turned into safe directory names"""
    from wiki_mirror import WikiMirror

    sanitize = WikiMirror._sanitize_filename
    assert sanitize("Home") == "Home"
    assert sanitize('a/b\\c?d%e*f:g|h"i<j>k') == "a_b_c_d_e_f_g_h_i_j_k"
    assert sanitize("Release   notes\t2024") == "Release_notes_2024"
    assert sanitize("  lead and trail  ") == "_lead_and_trail_"
    # Collisions are possible and not prevented
    assert sanitize("a/b") == sanitize("a:b")
    print("✓ Filename sanitization works")


def test_sanitize_filename_idempotent():
    """Test sanitizing twice equals sanitizing once"""
    from wiki_mirror import WikiMirror

    sanitize = WikiMirror._sanitize_filename
    samples = ["Home", "a / b", "x\n\ny", 'q?"<>|', "__", "", "  \t ", "Über: Seite"]
    for sample in samples:
        once = sanitize(sample)
        assert sanitize(once) == once, f"Not idempotent for {sample!r}"
    print("✓ Filename sanitization is idempotent")


def test_page_data_from_response():
    """Test typed parsing of the get-item response"""
    from wiki_mirror import PageData, WikiFile

    data = PageData.from_response("Home", {
        "data": {
            "html": "<p>Hi</p>",
            "files": [
                {"url": "/f/a.png", "name": "a.png", "size": 10},
                {"url": "/f/b.pdf", "name": "b.pdf"},
            ],
        }
    })
    assert data.title == "Home"
    assert data.html == "<p>Hi</p>"
    assert data.files == [WikiFile("/f/a.png", "a.png"), WikiFile("/f/b.pdf", "b.pdf")]

    # files may be absent or null
    assert PageData.from_response("X", {"data": {"html": ""}}).files == []
    assert PageData.from_response("X", {"data": {"html": "", "files": None}}).files == []
    print("✓ Response parsing works")


def test_page_data_malformed_response():
    """Test malformed responses raise MalformedResponseError"""
    from wiki_mirror import MalformedResponseError, PageData

    bad_payloads = [
        None,
        [],
        {},
        {"data": "nope"},
        {"data": {}},
        {"data": {"html": 5}},
        {"data": {"html": "", "files": "a.png"}},
        {"data": {"html": "", "files": ["a.png"]}},
        {"data": {"html": "", "files": [{"url": "/f/a.png"}]}},
    ]
    for payload in bad_payloads:
        try:
            PageData.from_response("Broken", payload)
        except MalformedResponseError as e:
            assert e.title == "Broken"
        else:
            raise AssertionError(f"Expected MalformedResponseError for {payload!r}")
    print("✓ Malformed responses are rejected")


def test_load_config():
    """Test configuration is read from the environment"""
    import os
    from wiki_mirror import config as config_module
    from wiki_mirror.config import load_config

    config = load_config({
        "CBT_HOST": "https://wiki.example.com/",
        "API_TOKEN": "secret",
        "OUTPUT_DIR": "/tmp/mirror",
    })
    assert config.host == "https://wiki.example.com"
    assert config.token == "secret"
    assert config.output_dir == "/tmp/mirror"

    config = load_config({"CBT_HOST": "https://wiki.example.com", "API_TOKEN": "secret"})
    package_dir = os.path.dirname(os.path.abspath(config_module.__file__))
    assert config.output_dir == os.path.join(package_dir, "out")
    assert config.output_dir == config_module.default_output_dir()
    assert os.path.basename(package_dir) == "wiki_mirror"
    print("✓ Config loading works")


def test_load_config_missing_values():
    """Test missing host or token is a configuration error"""
    from wiki_mirror import ConfigurationError
    from wiki_mirror.config import load_config

    try:
        load_config({"OUTPUT_DIR": "/tmp/mirror"})
    except ConfigurationError as e:
        assert e.missing == ["CBT_HOST", "API_TOKEN"]
        assert "CBT_HOST" in str(e)
    else:
        raise AssertionError("Expected ConfigurationError")

    try:
        load_config({"CBT_HOST": "https://wiki.example.com", "API_TOKEN": ""})
    except ConfigurationError as e:
        assert e.missing == ["API_TOKEN"]
    else:
        raise AssertionError("Expected ConfigurationError")
    print("✓ Missing config is reported")


def test_cli_missing_config_exits_nonzero():
    """Test the CLI fails fast without configuration"""
    from wiki_mirror import ConfigurationError
    from wiki_mirror import cli

    with patch.object(cli, "load_config", side_effect=ConfigurationError(["CBT_HOST"])), \
            patch.object(cli, "WikiMirror") as mirror_cls:
        assert cli.main([]) == 1
        mirror_cls.assert_not_called()
    print("✓ CLI reports missing config")


def test_cli_runs_pipeline():
    """Test the CLI runs the pipeline from Home by default"""
    from wiki_mirror import WikiPage
    from wiki_mirror import cli
    from wiki_mirror.config import MirrorConfig

    config = MirrorConfig(host="https://wiki.example.com", token="secret", output_dir="/tmp/out")
    with patch.object(cli, "load_config", return_value=config), \
            patch.object(cli, "WikiMirror") as mirror_cls:
        mirror_cls.return_value.mirror.return_value = WikiPage(title="Home")
        assert cli.main([]) == 0
        mirror_cls.assert_called_once_with(
            host="https://wiki.example.com", token="secret", timeout=None, save_markdown=False
        )
        mirror_cls.return_value.mirror.assert_called_once_with("Home", "/tmp/out")

    # Unreachable root is still a successful run
    with patch.object(cli, "load_config", return_value=config), \
            patch.object(cli, "WikiMirror") as mirror_cls:
        mirror_cls.return_value.mirror.return_value = None
        assert cli.main(["--root", "Start", "-o", "/tmp/other"]) == 0
        mirror_cls.return_value.mirror.assert_called_once_with("Start", "/tmp/other")

    # Unexpected exceptions escaping the pipeline fail the run
    with patch.object(cli, "load_config", return_value=config), \
            patch.object(cli, "WikiMirror") as mirror_cls:
        mirror_cls.return_value.mirror.side_effect = PermissionError("denied")
        assert cli.main([]) == 1
    print("✓ CLI pipeline works")


def run_all_tests():
    """Run all tests"""
    print("Running tests...\n")

    tests = [
        test_imports,
        test_mirror_initialization,
        test_page_url_encoding,
        test_sanitize_filename,
        test_sanitize_filename_idempotent,
        test_page_data_from_response,
        test_page_data_malformed_response,
        test_load_config,
        test_load_config_missing_values,
        test_cli_missing_config_exits_nonzero,
        test_cli_runs_pipeline,
    ]

    for test in tests:
        try:
            test()
        except Exception as e:
            print(f"✗ {test.__name__} failed: {e}")
            import traceback
            traceback.print_exc()
            return False

    print("\n✓ All tests passed!")
    return True


if __name__ == "__main__":
    import sys
    success = run_all_tests()
    sys.exit(0 if success else 1)
