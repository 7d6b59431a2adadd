# Released under Gnu GPL v2.0, see LICENSE file for details

import unittest

from bleedcheck.ciphers import DEFAULT_CIPHER_SUITES, expand_ranges, \
        cipher_suite_name


class TestExpandRanges(unittest.TestCase):
    def test_expand_ranges(self):
        self.assertEqual(expand_ranges([(1, 3), (10, 10)]), (1, 2, 3, 10))

    def test_expand_ranges_empty(self):
        self.assertEqual(expand_ranges([]), ())


class TestDefaultCipherSuites(unittest.TestCase):
    def test_size(self):
        self.assertEqual(len(DEFAULT_CIPHER_SUITES), 211)

    def test_unique(self):
        self.assertEqual(len(set(DEFAULT_CIPHER_SUITES)), 211)

    def test_boundaries(self):
        self.assertEqual(DEFAULT_CIPHER_SUITES[0], 0x0000)
        self.assertEqual(DEFAULT_CIPHER_SUITES[76], 0x004C)
        self.assertEqual(DEFAULT_CIPHER_SUITES[77], 0x0060)
        self.assertEqual(DEFAULT_CIPHER_SUITES[-3], 0xFEFE)
        self.assertEqual(DEFAULT_CIPHER_SUITES[-1], 0xFFE0)

    def test_common_suites_included(self):
        for suite in (0x002f, 0x0035, 0xc02f, 0xc030):
            self.assertIn(suite, DEFAULT_CIPHER_SUITES)

    def test_gaps_excluded(self):
        for suite in (0x004d, 0x005f, 0x006e, 0x00ba, 0xc000, 0xc03c):
            self.assertNotIn(suite, DEFAULT_CIPHER_SUITES)


class TestCipherSuiteName(unittest.TestCase):
    def test_known(self):
        self.assertEqual(cipher_suite_name(0x002f),
                         "TLS_RSA_WITH_AES_128_CBC_SHA")

    def test_unknown(self):
        self.assertEqual(cipher_suite_name(0xffe0), "0xffe0")


if __name__ == '__main__':
    unittest.main()
