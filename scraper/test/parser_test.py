import sys
import os
import unittest

# Add project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from scraper.parser import ReviewTuple, ReviewTupleParser, iter_arrays

JANE_TEXT = "Great service, highly recommend this shop to everyone"


class TestReviewTupleMatch(unittest.TestCase):

    def setUp(self):
        self.parser = ReviewTupleParser(min_field_length=6)

    def test_typical_review_tuple(self):
        found = self.parser.match(["Jane Doe", 5, JANE_TEXT, "2 weeks ago"])
        self.assertEqual("Jane Doe", found.author)
        self.assertEqual(5, found.rating)
        self.assertEqual(JANE_TEXT, found.text)
        self.assertEqual("2 weeks ago", found.relative_time)

    def test_identical_short_strings_rejected(self):
        self.assertIsNone(self.parser.match(["A", "A", 4]))

    def test_single_qualifying_string_rejected(self):
        # Author and text would be the same string
        self.assertIsNone(self.parser.match([4, "Only one long string here"]))

    def test_repeated_field_rejected(self):
        self.assertIsNone(self.parser.match(["Same value", 3, "Same value"]))

    def test_no_rating_rejected(self):
        self.assertIsNone(self.parser.match(["Jane Doe", 0, JANE_TEXT, 17]))

    def test_booleans_are_not_ratings(self):
        self.assertIsNone(self.parser.match([True, "Jane Doe", JANE_TEXT]))

    def test_first_rating_like_number_wins(self):
        found = self.parser.match([None, 12, 2, 4, "Jane Doe", JANE_TEXT])
        self.assertEqual(2, found.rating)

    def test_non_integral_numbers_skipped(self):
        found = self.parser.match([4.7, "Jane Doe", JANE_TEXT, 3.0])
        self.assertEqual(3, found.rating)
        self.assertIsInstance(found.rating, int)

    def test_short_strings_ignored(self):
        found = self.parser.match(["de", "Jane Doe", 1, JANE_TEXT, "0x1a"])
        self.assertEqual("Jane Doe", found.author)
        self.assertIsNone(found.relative_time)

    def test_german_relative_time(self):
        found = self.parser.match(["Anna K.", 4, "Sehr freundliches Team und faire Preise", "vor 3 Monaten"])
        self.assertEqual("vor 3 Monaten", found.relative_time)

    def test_strings_are_stripped(self):
        found = self.parser.match(["  Jane Doe ", 5, JANE_TEXT + "\n"])
        self.assertEqual("Jane Doe", found.author)
        self.assertEqual(JANE_TEXT, found.text)


class TestReviewTupleParse(unittest.TestCase):

    def setUp(self):
        self.parser = ReviewTupleParser(min_field_length=6)

    def test_walk_continues_into_matched_nodes(self):
        tree = [[
            "Jane Doe", 5, JANE_TEXT,
            ["Max Power", 3, "Okay experience overall, nothing special"]
        ]]
        found = self.parser.parse(tree)
        self.assertEqual(["Jane Doe", "Max Power"], [r.author for r in found])

    def test_traversal_is_document_order(self):
        tree = [
            [["first author", 1, "first review text that is long"]],
            ["second author", 2, "second review text that is long"],
            [[["third author", 3, "third review text that is long"]]],
        ]
        self.assertEqual(
            ["first author", "second author", "third author"],
            [r.author for r in self.parser.parse(tree)]
        )

    def test_descends_into_objects(self):
        tree = {"payload": [{"items": [["Jane Doe", 5, JANE_TEXT]]}]}
        found = self.parser.parse(tree)
        self.assertEqual([ReviewTuple("Jane Doe", 5, JANE_TEXT)], found)

    def test_scalars_and_empty_trees(self):
        self.assertEqual([], self.parser.parse(None))
        self.assertEqual([], self.parser.parse("Jane Doe"))
        self.assertEqual([], self.parser.parse([]))

    def test_deep_nesting_does_not_recurse(self):
        tree = ["Jane Doe", 5, JANE_TEXT]
        for _ in range(5000):
            tree = [tree]
        self.assertEqual(1, len(self.parser.parse(tree)))

    def test_every_array_position_visited(self):
        shared = ["x"]
        tree = [shared, [shared], {"k": shared}]
        self.assertEqual(5, len(list(iter_arrays(tree))))

    def test_all_matches_satisfy_review_invariants(self):
        tree = [
            ["Jane Doe", 5, JANE_TEXT],
            ["A", "A", 3],
            [9, "Some long string", "Another long string"],
            ["Reviewer", 4.0, "A perfectly ordinary review text"],
        ]
        for review in self.parser.parse(tree):
            self.assertIn(review.rating, {1, 2, 3, 4, 5})
            self.assertTrue(review.author)
            self.assertTrue(review.text)
            self.assertNotEqual(review.author, review.text)


if __name__ == '__main__':
    unittest.main()
