"""Application services for promo.

Services implement promotion logic on top of core/, git/ and platform/.
"""
