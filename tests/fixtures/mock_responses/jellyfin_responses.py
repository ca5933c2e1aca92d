"""
Mock Jellyfin/Emby item API responses for testing.
"""

JELLYFIN_ITEMS = {
    "Items": [
        {
            "Id": "movie001",
            "Name": "Test Movie 1",
            "Type": "Movie",
            "ProductionYear": 2024,
            "Overview": "A test movie for testing.",
            "RunTimeTicks": 72000000000,  # 2 hours in ticks
            "Genres": ["Action", "Adventure"],
            "Tags": ["Favorites"],
            "Path": "/media/movies/test_movie_1.mkv",
        },
        {
            "Id": "movie002",
            "Name": "Test Movie 2",
            "Type": "Movie",
            "ProductionYear": 2023,
            "RunTimeTicks": 54000000000,
            "Path": "/media/movies/test_movie_2.mkv",
        },
        {
            # No runtime: not playable
            "Id": "movie003",
            "Name": "Unscanned Movie",
            "Type": "Movie",
            "Path": "/media/movies/unscanned.mkv",
        },
        {
            "Id": "folder001",
            "Name": "Boxed Set",
            "Type": "BoxSet",
        },
    ],
    "TotalRecordCount": 4,
}

JELLYFIN_EPISODES = {
    "Items": [
        {
            "Id": "ep101",
            "Name": "Pilot",
            "Type": "Episode",
            "SeriesId": "series001",
            "SeriesName": "Test Show",
            "ParentIndexNumber": 1,
            "IndexNumber": 1,
            "RunTimeTicks": 13200000000,  # 22 minutes
            "Path": "/media/tv/test_show/s01e01.mkv",
        },
        {
            "Id": "ep102",
            "Name": "Second",
            "Type": "Episode",
            "SeriesId": "series001",
            "SeriesName": "Test Show",
            "ParentIndexNumber": 1,
            "IndexNumber": 2,
            "RunTimeTicks": 13200000000,
            "Path": "/media/tv/test_show/s01e02.mkv",
        },
    ],
    "TotalRecordCount": 2,
}

JELLYFIN_COMMERCIALS = {
    "Items": [
        {
            "Id": "ad001",
            "Name": "Soda",
            "Type": "Video",
            "RunTimeTicks": 300000000,  # 30 seconds
            "Path": "/media/commercials/soda.mp4",
        },
        {
            "Id": "ad002",
            "Name": "Cars",
            "Type": "Video",
            "RunTimeTicks": 150000000,
            "Path": "/media/commercials/cars.mp4",
        },
        {
            "Id": "trailer001",
            "Name": "Trailer",
            "Type": "Video",
            "RunTimeTicks": 1200000000,
            "Path": "/media/trailers/trailer.mp4",
        },
    ],
    "TotalRecordCount": 3,
}
