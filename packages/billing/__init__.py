"""
Billing package - usage metering, entitlements, overage and invoicing.

Services read usage and subscription records through the store interfaces in
`providers`; the SQL repositories are the default implementations. Amounts
are computed here, never charged: payment collection belongs to the caller.
"""
