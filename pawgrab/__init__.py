"""
pawgrab – bulk media and comic downloaders.

Supports:
  • Searching e621 by tag and downloading every matching post (bluepaw)
  • Filtering posts by a block list of general tags
  • Scraping a yiffer comic page and saving it as PDF or CBZ (yiffgrab)
  • Zipping the raw downloaded comic pages
"""

__version__ = "1.0.0"
