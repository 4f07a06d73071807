from __future__ import annotations

from typing import Final

# Step phrases shared with existing Patton feature files. The wording must not
# drift; groups are named because pytest-bdd binds step arguments by name.
SEARCH_TERM_AND_VERSION: Final = r'^I have search term "(?P<search_term>[^"]*)" and version "(?P<version>[^"]*)"$'
SEARCH_TERM: Final = r'^I have search term "(?P<search_term>[^"]*)"$'
WORDPRESS_PLUGIN: Final = r"^It is a Wordpress plugin$"
PACKAGE_MANAGER_OUTPUT: Final = r'^I have the output of "(?P<distro>[^"]*)" package manager$'
EXECUTE_WITH_SEARCH_TYPE: Final = r'^I execute Patton search with search type "(?P<search_type>[^"]*)"$'
AT_LEAST_ONE_CVE: Final = r"^I get at least one cve$"
RAW_INSTALLED_PACKAGES: Final = r'^I have the raw output of installed packages for "(?P<distro>[^"]*)" package manager$'
EXECUTE_WITH_TYPE: Final = r'^I execute Patton search with type "(?P<search_type>[^"]*)"$'
AT_LEAST_THESE_VULNERABILITIES: Final = r"^I get at least these vulnerabilities$"
NO_FALSE_POSITIVES: Final = r"^Not found these false positives$"

ALL_PATTERNS: Final = (
    SEARCH_TERM_AND_VERSION,
    SEARCH_TERM,
    WORDPRESS_PLUGIN,
    PACKAGE_MANAGER_OUTPUT,
    EXECUTE_WITH_SEARCH_TYPE,
    AT_LEAST_ONE_CVE,
    RAW_INSTALLED_PACKAGES,
    EXECUTE_WITH_TYPE,
    AT_LEAST_THESE_VULNERABILITIES,
    NO_FALSE_POSITIVES,
)
