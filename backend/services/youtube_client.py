from typing import List

from googleapiclient.discovery import build

from models import YouTubeChannel, YouTubeVideo


def get_youtube_service(creds):
    return build("youtube", "v3", credentials=creds, cache_discovery=False)


def _thumbnail(snippet: dict) -> str:
    thumbs = snippet.get("thumbnails", {})
    return (thumbs.get("high") or thumbs.get("default") or {}).get("url", "")


def search_videos(creds, query: str, limit: int = 5) -> List[YouTubeVideo]:
    response = get_youtube_service(creds).search().list(
        part="snippet",
        q=query,
        maxResults=limit,
        type="video",
        safeSearch="moderate",
    ).execute()

    videos = []
    for item in response.get("items", []):
        video_id = item.get("id", {}).get("videoId", "")
        snippet = item.get("snippet", {})
        videos.append(YouTubeVideo(
            id=video_id,
            title=snippet.get("title") or "No Title",
            description=snippet.get("description", ""),
            thumbnail_url=_thumbnail(snippet),
            channel_title=snippet.get("channelTitle", ""),
            publish_time=snippet.get("publishedAt", ""),
            video_url=f"https://www.youtube.com/watch?v={video_id}",
        ))
    return videos


def channel_stats(creds, channel_name: str = None, channel_id: str = None) -> List[YouTubeChannel]:
    """Statistics for a channel id, or for the top channel search hit for a name."""
    service = get_youtube_service(creds)

    if not channel_id and channel_name:
        found = service.search().list(
            part="snippet",
            q=channel_name,
            type="channel",
            maxResults=1,
        ).execute().get("items", [])
        if found:
            channel_id = found[0].get("id", {}).get("channelId")

    if not channel_id:
        return []

    response = service.channels().list(part="snippet,statistics", id=channel_id).execute()

    channels = []
    for item in response.get("items", []):
        snippet = item.get("snippet", {})
        stats = item.get("statistics", {})
        channels.append(YouTubeChannel(
            id=item.get("id", ""),
            title=snippet.get("title") or "Unknown",
            description=snippet.get("description", ""),
            custom_url=snippet.get("customUrl", ""),
            subscriber_count=stats.get("subscriberCount", "0"),
            view_count=stats.get("viewCount", "0"),
            video_count=stats.get("videoCount", "0"),
            thumbnail_url=_thumbnail(snippet),
        ))
    return channels
