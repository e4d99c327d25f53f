"""
Coupon Scraper - redemption code aggregation service.

Collects publicly posted redemption codes from community wiki pages,
normalizes them into CouponRecord objects and serves them over HTTP.
"""

__version__ = "0.1.0"
