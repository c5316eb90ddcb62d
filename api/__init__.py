"""
API 層

這個 package 只負責 HTTP 轉換，不放業務邏輯：
- identity：取得呼叫者 identity（X-User-Email）
- actions：所有寫入操作（intent dispatcher）
- games：查詢呼叫者的遊戲
"""
