# Copyright (c) 2025 Trae AI. All rights reserved.

import unittest
from bonarr.core.models import Confidence
from bonarr.core.pattern_matcher import PatternMatcher

class TestPatternMatcher(unittest.TestCase):
    def setUp(self):
        self.matcher = PatternMatcher()

    def test_compact_form_is_high(self):
        self.assertEqual(
            self.matcher.classify(2, 5, "Show.S02E05.1080p.mkv"),
            Confidence.HIGH
        )
        # Lower case and no padding
        self.assertEqual(
            self.matcher.classify(2, 5, "show.s2e5.mkv"),
            Confidence.HIGH
        )

    def test_verbose_form_is_high(self):
        self.assertEqual(
            self.matcher.classify(1, 3, "Show Season 1 Episode 3.mkv"),
            Confidence.HIGH
        )

    def test_cross_form_is_high(self):
        self.assertEqual(
            self.matcher.classify(3, 9, "Show - 3x09 - Title.avi"),
            Confidence.HIGH
        )

    def test_episode_word_is_medium(self):
        self.assertEqual(
            self.matcher.classify(1, 7, "Episode 07.mkv"),
            Confidence.MEDIUM
        )

    def test_bare_e_prefix_is_medium(self):
        self.assertEqual(
            self.matcher.classify(1, 12, "[Group] Show - E012 [1080p].mkv"),
            Confidence.MEDIUM
        )

    def test_bare_number_is_low(self):
        self.assertEqual(
            self.matcher.classify(1, 4, "[Group] Show - 04 [1080p].mkv"),
            Confidence.LOW
        )

    def test_leading_zeros_of_any_length(self):
        self.assertEqual(
            self.matcher.classify(1, 5, "Show S0001E0005.mkv"),
            Confidence.HIGH
        )

    def test_number_followed_by_digit_is_not_a_match(self):
        # Episode 1 must not match E12 or a bare 12
        self.assertIsNone(self.matcher.classify(3, 1, "Show E12.mkv"))
        self.assertIsNone(self.matcher.classify(3, 1, "Show - 12.mkv"))

    def test_no_match(self):
        self.assertIsNone(self.matcher.classify(1, 8, "Show.S01E05.mkv"))

    def test_pattern_order(self):
        patterns = self.matcher.build_patterns(1, 2)
        self.assertEqual(len(patterns), 6)
        self.assertTrue(patterns[0].search("S01E02"))
        self.assertTrue(patterns[5].search("Show 02"))

    def test_first_matching_pattern_decides_tier(self):
        # Matches both "Episode 5" and the bare number; the medium pattern comes first
        self.assertEqual(
            self.matcher.classify(1, 5, "Episode 5 - 5.mkv"),
            Confidence.MEDIUM
        )

if __name__ == "__main__":
    unittest.main()
