# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the blood donation platform.

This package contains pure business rules (contact formats, donor
eligibility, date handling) with no side effects.
"""
