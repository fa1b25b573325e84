import copy
import json
import sys
import tempfile
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from content.default_pack import DEFAULT_PACK_DATA  # noqa: E402
from content.loader import default_content_pack, load_pack_file, load_pack_text  # noqa: E402
from content.parsing import must_parse_json, try_parse_json  # noqa: E402
from content.schemas import pack_from_dict, validate_content_pack, validate_delta  # noqa: E402
from core.state import Delta  # noqa: E402


def _codes(data):
    return {e.code for e in validate_content_pack(data).errors}


class TestDefaultPack(unittest.TestCase):
    def test_default_pack_is_valid(self):
        result = validate_content_pack(DEFAULT_PACK_DATA)
        self.assertTrue(result.valid, result.errors)

    def test_default_pack_shape(self):
        pack = default_content_pack()
        self.assertEqual([s.id for s in pack.steps], [1, 2, 3, 4, 5])
        self.assertEqual(pack.step(1).option("A").delta, Delta(R=10, U=2, S=-2, C=3, I=2))
        self.assertEqual(pack.step(4).option("B").delta, Delta(R=10, U=12, S=-6, C=5, I=8))

    def test_unknown_step_and_choice(self):
        pack = default_content_pack()
        with self.assertRaises(ValueError):
            pack.step(6)
        with self.assertRaises(ValueError):
            pack.step(1).option("C")

    def test_pack_dict_round_trip_validates(self):
        pack = default_content_pack()
        self.assertEqual(pack_from_dict(pack.to_dict()), pack)


class TestPackValidation(unittest.TestCase):
    def setUp(self):
        self.data = copy.deepcopy(DEFAULT_PACK_DATA)

    def test_not_an_object(self):
        self.assertEqual(_codes([]), {"INVALID_PACK"})

    def test_bad_id_and_version(self):
        self.data["id"] = "bad id!"
        self.data["version"] = "1.0"
        codes = _codes(self.data)
        self.assertIn("INVALID_ID_FORMAT", codes)
        self.assertIn("INVALID_VERSION_FORMAT", codes)

    def test_wrong_step_count(self):
        self.data["steps"] = self.data["steps"][:4]
        codes = _codes(self.data)
        self.assertIn("WRONG_STEP_COUNT", codes)
        self.assertIn("NON_SEQUENTIAL_STEPS", codes)

    def test_step_id_out_of_range(self):
        self.data["steps"][4]["id"] = 7
        codes = _codes(self.data)
        self.assertIn("STEP_ID_OUT_OF_RANGE", codes)
        self.assertIn("NON_SEQUENTIAL_STEPS", codes)

    def test_missing_text_fields(self):
        self.data["steps"][0]["title"] = ""
        self.data["steps"][1]["scenario"] = "   "
        del self.data["steps"][2]["optionA"]["label"]
        self.data["steps"][3]["optionB"]["body"] = "x" * 1001
        codes = _codes(self.data)
        self.assertIn("MISSING_TITLE", codes)
        self.assertIn("EMPTY_SCENARIO", codes)
        self.assertIn("MISSING_LABEL", codes)
        self.assertIn("BODY_TOO_LONG", codes)

    def test_delta_range(self):
        errors = validate_delta({"R": 16, "U": -11, "S": 0, "C": "x", "I": True})
        codes = [e.code for e in errors]
        self.assertEqual(codes.count("DELTA_OUT_OF_RANGE"), 2)
        self.assertEqual(codes.count("INVALID_DELTA_VALUE"), 2)
        self.assertEqual(validate_delta({"R": -10, "U": 15, "S": 0, "C": 0, "I": 0}), [])

    def test_pack_from_dict_raises_with_report(self):
        self.data["version"] = "v1"
        with self.assertRaises(ValueError) as ctx:
            pack_from_dict(self.data)
        self.assertIn("INVALID_VERSION_FORMAT", str(ctx.exception))


class TestParsing(unittest.TestCase):
    def test_strict_json(self):
        self.assertEqual(must_parse_json('{"a": 1}'), {"a": 1})

    def test_forgiving_cleanup(self):
        raw = "\ufeff{\n  // comment\n  \u201ca\u201d: [1, 2,],\n}"
        res = try_parse_json(raw)
        self.assertEqual(res.data, {"a": [1, 2]})
        self.assertEqual(res.error, "")

    def test_non_object_root(self):
        res = try_parse_json("[1, 2]")
        self.assertIsNone(res.data)
        self.assertIn("not an object", res.error)

    def test_garbage_raises(self):
        with self.assertRaises(ValueError):
            must_parse_json("not json")

    def test_load_pack_text_and_file(self):
        text = json.dumps(DEFAULT_PACK_DATA)
        self.assertEqual(load_pack_text(text), default_content_pack())
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "pack.json"
            p.write_text(text, encoding="utf-8")
            self.assertEqual(load_pack_file(p).id, DEFAULT_PACK_DATA["id"])


if __name__ == "__main__":
    unittest.main()
