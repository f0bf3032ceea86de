"""
Example e2e project setup.

The browser_e2e.plugin pytest plugin is loaded through its entry point, so no
`pytest_plugins` line is needed here.

Run against local browsers:
    E2E_BROWSER_HOST=http://localhost:5757 pytest examples/ -v

Run on BrowserStack (tunnels localhost automatically):
    USE_BROWSERSTACK=true BROWSERSTACK_AUTH="user:key" \
        E2E_BROWSER_HOST=http://localhost:5757 pytest examples/ -v
"""
