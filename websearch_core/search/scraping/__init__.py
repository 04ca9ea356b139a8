# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from websearch_core.search.scraping.content import PageContentFetcher
from websearch_core.search.scraping.extract import extract_main_content, truncate_at_sentence

__all__ = ["PageContentFetcher", "extract_main_content", "truncate_at_sentence"]
