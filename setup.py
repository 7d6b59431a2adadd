#!/usr/bin/env python

# Released under Gnu GPL v2.0, see LICENSE file for details

from setuptools import setup

setup(name="bleedcheck",
      version="1.0.0",
      description="Checker for the Heartbleed (CVE-2014-0160) "
                  "vulnerability in TLS servers.",
      license="GPLv2",
      python_requires=">=3.6",
      install_requires=["tlslite-ng >= 0.8.2"],
      scripts=["scripts/heartbleed-check.py"],
      packages=["bleedcheck", "bleedcheck.utils"])
