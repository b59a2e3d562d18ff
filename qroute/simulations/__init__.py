# -*- coding: utf-8 -*-
"""Routing core: circuit IR, connectivity graphs, path synthesis, expansion,
assignment search and persistence.
"""
