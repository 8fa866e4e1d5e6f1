#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render label records onto Avery-style label sheet PDFs.
"""

import label_sheet_composer.cli


if __name__ == "__main__":
	label_sheet_composer.cli.main()
