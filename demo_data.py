# demo_data.py
# Static fixtures for the last fallback tier (no network, no key).

GENRES = [
    {"id": 28, "name": "Action"},
    {"id": 12, "name": "Adventure"},
    {"id": 16, "name": "Animation"},
    {"id": 35, "name": "Comedy"},
    {"id": 80, "name": "Crime"},
    {"id": 99, "name": "Documentary"},
    {"id": 18, "name": "Drama"},
    {"id": 10751, "name": "Family"},
    {"id": 14, "name": "Fantasy"},
    {"id": 36, "name": "History"},
    {"id": 27, "name": "Horror"},
    {"id": 10402, "name": "Music"},
    {"id": 9648, "name": "Mystery"},
    {"id": 10749, "name": "Romance"},
    {"id": 878, "name": "Science Fiction"},
    {"id": 10770, "name": "TV Movie"},
    {"id": 53, "name": "Thriller"},
    {"id": 10752, "name": "War"},
    {"id": 37, "name": "Western"},
]

MOVIES = [
    {
        "id": 278,
        "title": "The Shawshank Redemption",
        "poster_path": "/q6y0Go1tsGEsmtFryDOJo3dEmqu.jpg",
        "vote_average": 8.7,
        "release_date": "1994-09-23",
        "genre_ids": [18, 80],
    },
    {
        "id": 238,
        "title": "The Godfather",
        "poster_path": "/3bhkrj58Vtu7enYsRolD1fZdja1.jpg",
        "vote_average": 8.7,
        "release_date": "1972-03-14",
        "genre_ids": [18, 80],
    },
    {
        "id": 155,
        "title": "The Dark Knight",
        "poster_path": "/qJ2tW6WMUDux911r6m7haRef0WH.jpg",
        "vote_average": 8.5,
        "release_date": "2008-07-16",
        "genre_ids": [18, 28, 80, 53],
    },
    {
        "id": 27205,
        "title": "Inception",
        "poster_path": None,
        "vote_average": 8.4,
        "release_date": "2010-07-15",
        "genre_ids": [28, 878, 12],
    },
    {
        "id": 129,
        "title": "Spirited Away",
        "poster_path": None,
        "vote_average": 8.5,
        "release_date": "2001-07-20",
        "genre_ids": [16, 10751, 14],
    },
    {
        "id": 680,
        "title": "Pulp Fiction",
        "poster_path": None,
        "vote_average": 8.5,
        "release_date": "1994-09-10",
        "genre_ids": [53, 80],
    },
]
