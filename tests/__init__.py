"""
Browser E2E Tests

Run all tests:
    pytest tests/ -v

Run specific test file:
    pytest tests/test_config.py -v

None of these tests need a browser or a BrowserStack account; selenium and
BrowserStack Local are replaced with mocks.
"""
