"""LinkedIn DOM selector constants with fallbacks.

Ordered by stability: data-* > aria-* > class names.
Each constant is a tuple so callers iterate until a match is found.
"""

# --- Job card container ---
CARD_SELECTORS: tuple[str, ...] = (
    "li[data-occludable-job-id]",
    "[data-job-id]",
    "li.jobs-search-results__list-item",
    "li.scaffold-layout__list-item",
)

# --- Job ID attributes on the card element ---
JOB_ID_ATTR: str = "data-occludable-job-id"
JOB_ID_ATTR_FALLBACK: str = "data-job-id"

# --- Title link inside a card ---
TITLE_LINK_SELECTORS: tuple[str, ...] = (
    'a[href*="/jobs/view/"]',
    ".job-card-list__title a",
    "a.job-card-list__title",
    "a.job-card-container__link",
)

# --- Company name ---
COMPANY_SELECTORS: tuple[str, ...] = (
    "span.job-card-container__primary-description",
    ".artdeco-entity-lockup__subtitle",
    ".job-card-container__company-name",
)

# --- Location ---
LOCATION_SELECTORS: tuple[str, ...] = (
    "li.job-card-container__metadata-item",
    ".artdeco-entity-lockup__caption",
    "span.job-card-container__metadata-wrapper",
)

# --- Posted time ---
POSTED_TIME_SELECTORS: tuple[str, ...] = (
    "time",
    "span.job-card-container__listed-time",
    ".job-card-container__footer-item",
)

# --- Pagination ---
NEXT_PAGE_SELECTORS: tuple[str, ...] = (
    'button[aria-label="Next"]',
    'button[aria-label="View next page"]',
    "button.jobs-search-pagination__button--next",
)

# --- Job detail page ---
DESCRIPTION_SELECTORS: tuple[str, ...] = (
    ".jobs-description__content",
    "#job-details",
    ".jobs-box__html-content",
)

SALARY_SELECTORS: tuple[str, ...] = (
    "#SALARY",
    ".salary-main-rail__data-body",
    ".job-details-jobs-unified-top-card__job-insight--highlight",
)

HIRING_TEAM_SELECTORS: tuple[str, ...] = (
    '[data-test-id="hiring-team"]',
    ".job-details-people-who-can-help__section--two-pane",
    ".hirer-card__hirer-information",
)

HIRING_NAME_SELECTORS: tuple[str, ...] = (
    ".hiring-team__name",
    ".jobs-poster__name",
    "strong",
)

HIRING_TITLE_SELECTORS: tuple[str, ...] = (
    ".hiring-team__title",
    ".hirer-card__job-poster",
    ".text-body-small",
)

PROFILE_LINK_SELECTORS: tuple[str, ...] = ('a[href*="/in/"]',)

MAILTO_SELECTORS: tuple[str, ...] = ('a[href^="mailto:"]',)

# --- Authentication ---
LOGGED_IN_SELECTORS: tuple[str, ...] = (
    'button[aria-label*="View profile"]',
    "img.global-nav__me-photo",
    ".global-nav__me",
)

LOGIN_USERNAME_SELECTOR: str = "#username"
LOGIN_PASSWORD_SELECTOR: str = "#password"
LOGIN_SUBMIT_SELECTOR: str = 'button[type="submit"]'
