#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Lay out product barcodes on printable label sheets.
"""

import label_sheet_layout.cli


if __name__ == "__main__":
	label_sheet_layout.cli.main()
