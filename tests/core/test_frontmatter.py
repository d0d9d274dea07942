"""Tests for the line-oriented frontmatter codec."""

from memx.core.frontmatter import build_frontmatter, parse_frontmatter


class TestParseFrontmatter:
    def test_basic(self):
        text = "---\nstatus: active\ntask: demo\n---\n\n# State\n"
        meta, body = parse_frontmatter(text)
        assert meta == {"status": "active", "task": "demo"}
        assert body == "# State"

    def test_no_frontmatter(self):
        text = "# Learnings\n\n- one\n"
        meta, body = parse_frontmatter(text)
        assert meta == {}
        assert body == text

    def test_empty_body(self):
        meta, body = parse_frontmatter("---\nstatus: done\n---\n\n")
        assert meta == {"status": "done"}
        assert body == ""

    def test_empty_string(self):
        assert parse_frontmatter("") == ({}, "")

    def test_none(self):
        assert parse_frontmatter(None) == ({}, "")

    def test_value_keeps_later_colons(self):
        meta, _ = parse_frontmatter("---\nwake_command: cd /tmp && echo a:b:c\n---\n\nx")
        assert meta["wake_command"] == "cd /tmp && echo a:b:c"

    def test_values_are_not_coerced(self):
        meta, _ = parse_frontmatter("---\nflag: true\ncount: 3\n---\n\nx")
        assert meta["flag"] == "true"
        assert meta["count"] == "3"

    def test_lines_without_colon_are_dropped(self):
        meta, _ = parse_frontmatter("---\nstatus: active\nnonsense\n: orphan\n---\n\nx")
        assert meta == {"status": "active"}

    def test_incomplete_frontmatter(self):
        text = "---\nstatus: active\nno closing delimiter"
        meta, body = parse_frontmatter(text)
        assert meta == {}
        assert body == text


class TestBuildFrontmatter:
    def test_layout(self):
        assert build_frontmatter({"status": "active"}, "# State") == "---\nstatus: active\n---\n\n# State"

    def test_key_order_is_preserved(self):
        text = build_frontmatter({"b": "2", "a": "1"}, "")
        assert text.index("b: 2") < text.index("a: 1")

    def test_roundtrip(self):
        meta = {"task": "demo", "blocker": "waiting on review: PR #12"}
        body = "# Goal\n\nShip it\n\n## Definition of Done"
        assert parse_frontmatter(build_frontmatter(meta, body)) == (meta, body)

    def test_roundtrip_empty_metadata(self):
        assert parse_frontmatter(build_frontmatter({}, "body")) == ({}, "body")
