"""pactbroker: contract registry core.

Stores pacts between consumer and provider pacticipants, deduplicates
their content, and resolves latest / previous / next / previous-distinct
pacts by consumer version order.
"""
