#!/usr/bin/env python3

"""Domain models."""
