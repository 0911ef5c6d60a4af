"""
Rule loading and validation tests.
"""

import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from redis_cleaner.rules import Rule, RuleError, load_rules, parse_rules


class ParseRulesTest(unittest.TestCase):

    def test_camel_case_keys(self):
        rules = parse_rules([
            {"name": "sessions", "pattern": "session:*", "ttlSeconds": 3600, "batch": 100},
        ])

        self.assertEqual(len(rules), 1)
        self.assertEqual(rules[0].ttl_seconds, 3600)
        self.assertEqual(rules[0].batch_size, 100)

    def test_alternative_keys(self):
        rules = parse_rules([
            {"name": "a", "pattern": "a:*", "ttl_seconds": 5, "batchSize": 10},
            {"name": "b", "pattern": "b:*", "ttlSeconds": 6, "batch_size": 20},
        ])

        self.assertEqual([r.batch_size for r in rules], [10, 20])

    def test_order_is_preserved(self):
        data = [
            {"name": n, "pattern": f"{n}:*", "ttlSeconds": 1, "batch": 1}
            for n in ("zeta", "alpha", "mid")
        ]
        self.assertEqual([r.name for r in parse_rules(data)], ["zeta", "alpha", "mid"])

    def test_invalid_values(self):
        bad_entries = [
            {"name": "x", "pattern": "x:*", "ttlSeconds": 0, "batch": 10},
            {"name": "x", "pattern": "x:*", "ttlSeconds": 10, "batch": -1},
            {"name": "x", "pattern": "", "ttlSeconds": 10, "batch": 10},
            {"name": "", "pattern": "x:*", "ttlSeconds": 10, "batch": 10},
            {"name": "x", "pattern": "x:*", "batch": 10},
        ]
        for entry in bad_entries:
            with self.subTest(entry=entry):
                with self.assertRaises(RuleError):
                    parse_rules([entry])

    def test_duplicate_names(self):
        entry = {"name": "dup", "pattern": "x:*", "ttlSeconds": 1, "batch": 1}
        with self.assertRaisesRegex(RuleError, "Duplicate"):
            parse_rules([entry, dict(entry, pattern="y:*")])

    def test_document_shape(self):
        self.assertEqual(parse_rules(None), [])
        with self.assertRaises(RuleError):
            parse_rules({"name": "not-a-list"})
        with self.assertRaises(RuleError):
            parse_rules(["just a string"])

    def test_rule_is_frozen(self):
        rule = Rule(name="a", pattern="a:*", ttl_seconds=1, batch_size=1)
        with self.assertRaises(ValidationError):
            rule.ttl_seconds = 2


class LoadRulesTest(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, text: str) -> Path:
        path = self.dir / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_load_yaml(self):
        path = self.write(
            "- name: sessions\n"
            "  pattern: \"session:*\"\n"
            "  ttlSeconds: 3600\n"
            "  batch: 100\n"
        )

        rules = load_rules(path)

        self.assertEqual(rules[0].name, "sessions")
        self.assertEqual(rules[0].pattern, "session:*")

    def test_missing_file(self):
        with self.assertRaises(RuleError):
            load_rules(self.dir / "nope.yaml")

    def test_invalid_yaml(self):
        with self.assertRaises(RuleError):
            load_rules(self.write("- name: [unclosed\n"))

    def test_example_file_is_valid(self):
        example = Path(__file__).resolve().parents[1] / "config.example.yaml"
        rules = load_rules(example)
        self.assertGreaterEqual(len(rules), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
