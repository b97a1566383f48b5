import streamlit as st
import pandas as pd
import html
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime
from catalog import (
    ALL_GENRES,
    CatalogError,
    CatalogGateway,
    SearchRunner,
    fetch_poster_thumbnail,
    filter_by_genre,
    results_frame,
)
from config import (
    ADMIN_USERNAME,
    REQUEST_TIMEOUT,
    REVIEWS_FILE,
    USERS_FILE,
    WATCHLIST_DIR,
    ensure_data_files,
    setup_logging,
)
from forms import validate_credentials, validate_new_password, validate_review_text
from navigation import Navigator, Screen
from store import AccountStore, Review, ReviewStore, WatchlistEntry, WatchlistStore

# Page configuration
st.set_page_config(
    page_title="Movie Explorer",
    page_icon="🎬",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for dark theme and styling
st.markdown("""
<style>
    .stApp {
        background-color: #0f0f0f;
    }

    .top-header {
        text-align: center;
        font-size: 3rem;
        font-weight: bold;
        color: #ff4444;
        text-shadow: 2px 2px 4px rgba(0,0,0,0.8);
        border: 2px solid #ff4444;
        padding: 1rem;
        margin-bottom: 2rem;
    }

    .section-header {
        font-size: 1.5rem;
        font-weight: bold;
        color: #ff4444;
        margin: 2rem 0 1rem 0;
        border-left: 4px solid #ff4444;
        padding-left: 1rem;
    }

    .movie-title {
        font-size: 1.3rem;
        font-weight: bold;
        color: #ffffff;
    }

    .review-entry {
        background-color: #2a2a2a;
        padding: 0.5rem 1rem;
        border-radius: 8px;
        margin-bottom: 0.5rem;
    }

    .user-rating {
        color: #ffd700;
        font-weight: bold;
    }

    .guest-note {
        color: #999;
        font-style: italic;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_stores():
    """Process-wide stores, loaded once"""
    setup_logging()
    ensure_data_files(USERS_FILE, REVIEWS_FILE)
    accounts = AccountStore(USERS_FILE).init()
    reviews = ReviewStore(REVIEWS_FILE).init()
    watchlists = WatchlistStore(WATCHLIST_DIR)
    return accounts, reviews, watchlists


@st.cache_resource
def get_gateway():
    return CatalogGateway()


@st.cache_data(ttl=86400)  # Genres rarely change
def load_genres():
    return get_gateway().get_genres()


@st.cache_data(ttl=3600, max_entries=500)
def load_thumbnail(url):
    return fetch_poster_thumbnail(url)


def get_navigator():
    if 'navigator' not in st.session_state:
        accounts, _, _ = get_stores()
        st.session_state.navigator = Navigator(accounts)
    return st.session_state.navigator


def get_search_runner():
    if 'search_runner' not in st.session_state:
        st.session_state.search_runner = SearchRunner(get_gateway().search)
    return st.session_state.search_runner


def show_header(subtitle=None):
    st.markdown('<div class="top-header">🎬 Movie Explorer</div>', unsafe_allow_html=True)
    if subtitle:
        st.markdown(f"### {subtitle}")


def show_welcome_page(nav):
    show_header("Welcome to Movie Explorer!")
    st.write("Search movies, build a watchlist and share your reviews.")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        if st.button("Login", type="primary", use_container_width=True):
            nav.go(Screen.LOGIN)
            st.rerun()
    with col2:
        if st.button("Sign Up", type="primary", use_container_width=True):
            nav.go(Screen.SIGNUP)
            st.rerun()
    with col3:
        if st.button("Continue without login", use_container_width=True):
            nav.continue_as_guest()
            st.rerun()
    with col4:
        if st.button("Are you an admin?", use_container_width=True):
            nav.go(Screen.ADMIN_LOGIN)
            st.rerun()


def show_login_page(nav):
    show_header("User Login")

    username = st.text_input("Username", placeholder="Enter your username", key="login_username")
    password = st.text_input("Password", type="password", key="login_password")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Login", type="primary"):
            error = validate_credentials(username, password)
            if error:
                st.error(error)
            elif nav.login(username.strip(), password):
                st.session_state.flash = f"Login Successful! Welcome, {nav.session.username}!"
                st.rerun()
            else:
                st.error("Invalid Username or Password.")
    with col2:
        if st.button("Back to Welcome"):
            nav.go(Screen.WELCOME)
            st.rerun()


def show_signup_page(nav):
    show_header("Create New Account")

    username = st.text_input("Username", placeholder="Choose a unique username", key="signup_username")
    password = st.text_input("Password", type="password", key="signup_password")
    confirm = st.text_input("Confirm Password", type="password", key="signup_confirm")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Sign Up", type="primary"):
            error = nav.sign_up(username, password, confirm)
            if error:
                st.error(error)
            else:
                st.session_state.flash = "Registration Successful! You can now log in."
                st.rerun()
    with col2:
        if st.button("Back to Welcome"):
            nav.go(Screen.WELCOME)
            st.rerun()


def show_admin_login_page(nav):
    show_header("Admin Login")

    username = st.text_input("Admin Username", key="admin_username")
    password = st.text_input("Admin Password", type="password", key="admin_password")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Login", type="primary"):
            if nav.admin_login(username.strip(), password):
                st.session_state.flash = "Admin Login Successful!"
                st.rerun()
            else:
                st.error("Invalid Admin Credentials.")
    with col2:
        if st.button("Back to Welcome"):
            nav.go(Screen.WELCOME)
            st.rerun()


def show_password_form(title, on_submit, key_prefix):
    """Shared change-password form; ``on_submit(new_password)`` returns success"""
    st.markdown(f"#### {title}")
    new_password = st.text_input("New Password", type="password", key=f"{key_prefix}_new")
    confirm = st.text_input("Confirm New Password", type="password", key=f"{key_prefix}_confirm")

    if st.button("Change Password", type="primary", key=f"{key_prefix}_submit"):
        error = validate_new_password(new_password, confirm)
        if error:
            st.error(error)
        elif on_submit(new_password):
            st.success("Password updated successfully!")
        else:
            st.error("Failed to update password.")


def show_profile_page(nav):
    accounts, _, _ = get_stores()
    show_header("User Profile")
    st.write(f"**Username:** {nav.session.username}")

    show_password_form(
        "Change Password",
        lambda new_password: accounts.update_password(nav.session.username, new_password),
        "profile"
    )

    if st.button("Back to Main App"):
        nav.go(Screen.MAIN_APP)
        st.rerun()


def show_admin_profile_page(nav):
    accounts, _, _ = get_stores()
    show_header("Admin Profile")
    st.write(f"**Username:** {ADMIN_USERNAME}")

    show_password_form("Change Admin Password", accounts.update_admin_password, "admin_profile")

    if st.button("Back to Admin Panel"):
        nav.go(Screen.ADMIN_PANEL)
        st.rerun()


def run_search(query):
    """Search the catalog; only the newest request's results are kept"""
    runner = get_search_runner()
    future = runner.submit(query)
    try:
        accepted = future.result(timeout=REQUEST_TIMEOUT * 2)
    except CatalogError as e:
        st.error(f"Error fetching movies. Please try again. ({e})")
        st.session_state.search_results = []
        return
    except FutureTimeout:
        st.error("The movie service took too long to respond.")
        st.session_state.search_results = []
        return

    if accepted:
        st.session_state.search_results = runner.value
        st.session_state.results_label = f"Results for '{query}'"


def show_random_movie():
    try:
        movie = get_gateway().random_movie()
    except CatalogError as e:
        st.error(f"Error fetching random movie. ({e})")
        movie = None

    st.session_state.search_results = [movie] if movie else []
    st.session_state.results_label = "Random pick" if movie else "No random movies found."


def show_rating_form(movie_id, title, username):
    _, reviews, _ = get_stores()
    with st.expander(f"Rate & Review: {title}"):
        rating = st.slider("Rating (1-5)", min_value=1, max_value=5, value=3, key=f"rating_{movie_id}")
        text = st.text_area("Your Review", key=f"review_text_{movie_id}")
        if st.button("Submit Review", key=f"submit_review_{movie_id}", type="primary"):
            error = validate_review_text(text)
            if error:
                st.error(error)
            else:
                reviews.add(Review(movie_id, username, rating, text.strip()))
                st.success("Review submitted successfully!")
                st.rerun()


def display_movie_card(movie, nav, context=""):
    _, reviews, watchlists = get_stores()
    movie_id = int(movie['id'])
    key = f"{context}_{movie_id}"

    col1, col2 = st.columns([1, 4])
    with col1:
        st.image(movie['poster_url'], width=120)

    with col2:
        st.markdown(f'<div class="movie-title">{html.escape(movie["title"])}</div>', unsafe_allow_html=True)
        count, average = reviews.summary(movie_id)
        if count:
            st.markdown(f'<span class="user-rating">{"★" * round(average)} {average}/5</span> ({count} reviews)',
                        unsafe_allow_html=True)
        st.write(f"**Description:** {movie['overview']}")

        btn1, btn2, _ = st.columns([1, 1, 3])
        with btn1:
            if st.button("🎞️ Trailer", key=f"trailer_{key}"):
                try:
                    st.session_state[f"trailer_url_{movie_id}"] = get_gateway().find_trailer_url(movie_id) or ""
                except CatalogError as e:
                    st.error(f"Error opening trailer. ({e})")
        with btn2:
            if st.button("+ Watchlist", key=f"watch_{key}"):
                entry = WatchlistEntry(movie_id, movie['title'], movie['poster_url'])
                if watchlists.add(nav.session.identity, entry):
                    st.session_state.flash = f"{movie['title']} added to watchlist."
                    st.rerun()
                else:
                    st.info("Movie is already in your watchlist.")

        trailer_url = st.session_state.get(f"trailer_url_{movie_id}")
        if trailer_url:
            st.link_button("▶ Watch trailer on YouTube", trailer_url)
        elif trailer_url == "":
            st.info("Trailer not available for this movie.")

        if not nav.session.is_guest:
            show_rating_form(movie_id, movie['title'], nav.session.username)

        movie_reviews = reviews.list_for_movie(movie_id)
        if movie_reviews:
            st.markdown("**User Reviews**")
            for review in movie_reviews:
                st.markdown(
                    f'<div class="review-entry"><b>{html.escape(review.username)}</b> rated: {review.rating}/5<br>{html.escape(review.text)}</div>',
                    unsafe_allow_html=True
                )
    st.markdown("---")


def show_watchlist_sidebar(nav):
    _, _, watchlists = get_stores()
    identity = nav.session.identity

    st.sidebar.title("📋 Watchlist")
    entries = watchlists.entries(identity)
    if not entries:
        st.sidebar.write("Your watchlist is empty.")
        return

    for idx, entry in enumerate(entries):
        col1, col2, col3 = st.sidebar.columns([1, 3, 1])
        with col1:
            thumbnail = load_thumbnail(entry.poster_url) if entry.poster_url else None
            if thumbnail is not None:
                st.image(thumbnail)
        with col2:
            # Clicking a title searches for it
            if st.button(entry.title, key=f"wl_search_{idx}_{entry.movie_id}"):
                st.session_state.pending_search = entry.title
                st.rerun()
        with col3:
            if st.button("✖", key=f"wl_remove_{idx}_{entry.movie_id}"):
                removed = watchlists.remove(identity, idx)
                if removed:
                    st.session_state.flash = f"{removed.title} removed from watchlist."
                st.rerun()

    st.sidebar.markdown("---")
    if not st.session_state.get('confirm_clear', False):
        if st.sidebar.button("Clear All"):
            st.session_state.confirm_clear = True
            st.rerun()
    else:
        st.sidebar.warning("Are you sure you want to clear your entire watchlist?")
        col1, col2 = st.sidebar.columns(2)
        with col1:
            if st.button("✅ Yes, Clear", key="confirm_clear_yes"):
                watchlists.clear(identity)
                st.session_state.confirm_clear = False
                st.session_state.flash = "Watchlist cleared."
                st.rerun()
        with col2:
            if st.button("❌ Cancel", key="confirm_clear_no"):
                st.session_state.confirm_clear = False
                st.rerun()


def show_main_app(nav):
    header_col1, header_col2 = st.columns([3, 1])
    with header_col1:
        show_header()
    with header_col2:
        if nav.session.is_guest:
            st.markdown('<p class="guest-note">You are browsing as Guest.</p>', unsafe_allow_html=True)
            if st.button("Back to Welcome"):
                nav.go(Screen.WELCOME)
                st.session_state.search_results = []
                st.rerun()
        else:
            st.markdown(f"**Welcome, {nav.session.username}!**")
            if st.button("Profile"):
                nav.go(Screen.PROFILE)
                st.rerun()
            if st.button("Logout", type="secondary"):
                nav.logout()
                st.session_state.search_results = []
                st.rerun()

    try:
        genre_map = load_genres()
    except CatalogError:
        st.error("Error loading genres. Please check your internet connection.")
        genre_map = {}

    pending = st.session_state.pop('pending_search', None)
    if pending:
        st.session_state.movie_search = pending

    search_col1, search_col2, search_col3, search_col4 = st.columns([3, 1, 2, 1])
    with search_col1:
        query = st.text_input("🔍 Search", placeholder="Movie title...", key="movie_search")
    with search_col2:
        st.markdown('<div style="height: 1.75rem;"></div>', unsafe_allow_html=True)
        search_button = st.button("Search", type="primary")
    with search_col3:
        genre = st.selectbox("Genre", [ALL_GENRES] + sorted(genre_map.values()), key="genre_filter")
    with search_col4:
        st.markdown('<div style="height: 1.75rem;"></div>', unsafe_allow_html=True)
        random_button = st.button("Random")

    if (search_button or pending) and query.strip():
        run_search(query.strip())
    elif random_button:
        show_random_movie()

    results = st.session_state.get('search_results')
    if results is None:
        return

    df = filter_by_genre(results_frame(results), genre, genre_map)
    st.markdown(f'<div class="section-header">{st.session_state.get("results_label", "Results")}</div>',
                unsafe_allow_html=True)
    if df.empty:
        st.write("No movies found for your search.")
        return

    for idx, (_, movie) in enumerate(df.iterrows()):
        display_movie_card(movie, nav, context=f"result_{idx}")


def show_users_tab(accounts):
    users_df = pd.DataFrame(
        [{'Username': a.username, 'Role': 'admin' if a.username == ADMIN_USERNAME else 'user'}
         for a in accounts.list_all()]
    )
    st.dataframe(users_df, use_container_width=True, hide_index=True)

    with st.expander("Add User"):
        username = st.text_input("Username", key="add_user_name")
        password = st.text_input("Password", type="password", key="add_user_password")
        if st.button("Add User", type="primary"):
            error = validate_credentials(username, password)
            if error:
                st.error(error)
            elif accounts.register(username.strip(), password):
                st.success("User added successfully.")
                st.rerun()
            else:
                st.error("Username already exists.")

    usernames = [a.username for a in accounts.list_all()]
    selected = st.selectbox("Select user", usernames, key="selected_user")
    if selected:
        show_password_form(
            f"Edit User (Change Password): {selected}",
            lambda new_password: accounts.update_password(selected, new_password),
            f"edit_user_{selected}"
        )

        if st.button("Delete User", key="delete_user"):
            if selected == ADMIN_USERNAME:
                st.error("Cannot delete the admin user.")
            elif accounts.delete(selected):
                st.session_state.flash = f"User {selected} deleted successfully."
                st.rerun()
            else:
                st.error(f"Failed to delete user {selected}")


def show_reviews_tab(reviews):
    all_reviews = reviews.list_all()
    if not all_reviews:
        st.write("No reviews yet.")
        return

    reviews_df = pd.DataFrame([
        {
            'Movie ID': r.movie_id,
            'Username': r.username,
            'Rating': r.rating,
            'Review': r.text,
            'Created': datetime.fromtimestamp(r.created_at / 1000).strftime('%Y-%m-%d %H:%M:%S'),
        }
        for r in all_reviews
    ])
    st.dataframe(reviews_df, use_container_width=True, hide_index=True)

    selected = st.selectbox(
        "Select review",
        range(len(all_reviews)),
        format_func=lambda i: f"#{all_reviews[i].movie_id} by {all_reviews[i].username} ({reviews_df.iloc[i]['Created']})",
        key="selected_review"
    )
    review = all_reviews[selected]

    with st.expander("Edit Review"):
        new_rating = st.slider("Rating (1-5)", 1, 5, review.rating, key=f"edit_rating_{review.key}")
        new_text = st.text_area("Review", review.text, key=f"edit_text_{review.key}")
        if st.button("Save Review", type="primary"):
            error = validate_review_text(new_text)
            if error:
                st.error(error)
            elif reviews.update(review.movie_id, review.username, review.created_at, new_rating, new_text.strip()):
                st.session_state.flash = "Review updated successfully."
                st.rerun()
            else:
                st.error("Failed to update review.")

    if st.button("Delete Review"):
        if reviews.delete(review.movie_id, review.username, review.created_at):
            st.session_state.flash = "Review deleted successfully."
            st.rerun()
        else:
            st.error("Failed to delete review.")


def show_admin_panel(nav):
    accounts, reviews, _ = get_stores()
    show_header("Admin Panel")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Change Admin Password"):
            nav.go(Screen.ADMIN_PROFILE)
            st.rerun()
    with col2:
        if st.button("Back to Welcome"):
            nav.leave_admin()
            st.rerun()

    users_tab, reviews_tab = st.tabs(["Users", "Reviews"])
    with users_tab:
        show_users_tab(accounts)
    with reviews_tab:
        show_reviews_tab(reviews)


SCREENS = {
    Screen.WELCOME: show_welcome_page,
    Screen.LOGIN: show_login_page,
    Screen.SIGNUP: show_signup_page,
    Screen.ADMIN_LOGIN: show_admin_login_page,
    Screen.MAIN_APP: show_main_app,
    Screen.PROFILE: show_profile_page,
    Screen.ADMIN_PANEL: show_admin_panel,
    Screen.ADMIN_PROFILE: show_admin_profile_page,
}


def main():
    nav = get_navigator()

    flash = st.session_state.pop('flash', None)
    if flash:
        st.success(flash)

    if nav.screen is Screen.MAIN_APP:
        show_watchlist_sidebar(nav)

    SCREENS[nav.screen](nav)


if __name__ == "__main__":
    main()
